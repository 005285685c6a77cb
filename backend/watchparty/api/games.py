import re

from flask import Blueprint, current_app, jsonify, request

from watchparty.services.scores.espn import SPORT_PATHS

games = Blueprint('games', __name__)

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


@games.route('', methods=['GET'])
def list_games():
    """
    Lists the scoreboard for a sport and day. Soccer needs a leagueKey;
    upstream failures come back as an empty list rather than an error.
    """
    sport = (request.args.get('sport') or 'nba').lower()
    date = request.args.get('date')
    league_key = request.args.get('leagueKey')

    if date and not _DATE_RE.match(date):
        return jsonify({'error': 'date must be YYYY-MM-DD'}), 400

    if sport == 'soccer':
        if not league_key:
            return jsonify({'sport': sport, 'events': []})
        events = current_app.extensions['score_client'].list_games(sport, league_key, date)
        return jsonify({'sport': sport, 'leagueKey': league_key, 'events': events})

    if sport not in SPORT_PATHS:
        return jsonify({'error': 'Unknown sport'}), 400

    events = current_app.extensions['score_client'].list_games(sport, None, date)
    return jsonify({'sport': sport, 'events': events})
