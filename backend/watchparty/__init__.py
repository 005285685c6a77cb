import json
import logging

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    allowed_origins = list(flask_app.config.get('CORS_ORIGINS') or [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from watchparty.broadcast import SocketIONotifier
    from watchparty.rooms import RoomRegistry
    from watchparty.services.scores import ScoreboardClient

    flask_app.extensions['room_registry'] = RoomRegistry(
        SocketIONotifier(socketio),
        starting_credits=int(flask_app.config.get('STARTING_CREDITS', 1000)),
        private_prefix=flask_app.config.get('PRIVATE_ROOM_PREFIX', 'private:'),
        logger=flask_app.logger,
    )
    flask_app.extensions['score_client'] = ScoreboardClient(
        base_url=flask_app.config['ESPN_BASE_URL'],
        timeout=float(flask_app.config.get('SCORE_FETCH_TIMEOUT_SEC', 15)),
    )

    # Import and register blueprints here
    from watchparty.main import main
    flask_app.register_blueprint(main)

    from watchparty.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from watchparty.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers
    from watchparty.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('scoreboard')
    @click.option('--sport', default='nba', help='nba, nfl, nhl, mlb or soccer')
    @click.option('--league', default=None, help='League key, required for soccer (e.g. eng.1)')
    @click.option('--date', default=None, help='YYYY-MM-DD')
    def scoreboard_command(sport, league, date):
        """Prints the normalised scoreboard from the score feed."""
        from watchparty.services.scores import ScoreLookupError
        client = flask_app.extensions['score_client']
        try:
            games_list = client.fetch_scoreboard(sport, league, date)
        except ScoreLookupError as exc:
            raise click.ClickException(str(exc))
        click.echo(json.dumps(games_list, indent=2))

    flask_app.cli.add_command(scoreboard_command)

    return flask_app
