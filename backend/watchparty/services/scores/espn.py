import logging
import re
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://site.api.espn.com/apis/site/v2/sports'

SPORT_PATHS = {
    'nba': 'basketball/nba',
    'nfl': 'football/nfl',
    'nhl': 'hockey/nhl',
    'mlb': 'baseball/mlb',
}

_ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')


class ScoreLookupError(Exception):
    """The score feed could not answer (timeout, HTTP error, bad payload)."""


class UnknownSportError(ValueError):
    pass


def to_feed_date(value) -> Optional[str]:
    """'2026-10-19' or '2026-10-19T19:00Z' -> '20261019'; None when unparseable."""
    if not isinstance(value, str):
        return None
    m = _ISO_DATE_RE.match(value.strip())
    if not m:
        return None
    return ''.join(m.groups())


def _score(value) -> Optional[float]:
    if isinstance(value, dict):
        value = value.get('value', value.get('displayValue'))
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        # Non-integral scores are passed through so settlement can refuse them
        return int(value) if float(value).is_integer() else value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def normalize_event(ev: Dict[str, Any]) -> Dict[str, Any]:
    status_type = ((ev.get('status') or {}).get('type') or {})
    competitions = ev.get('competitions') or [{}]
    competitors = competitions[0].get('competitors') or []
    home = next((c for c in competitors if c.get('homeAway') == 'home'), {})
    away = next((c for c in competitors if c.get('homeAway') == 'away'), {})
    return {
        'externalId': str(ev.get('id')) if ev.get('id') is not None else None,
        'name': ev.get('name'),
        'homeTeam': (home.get('team') or {}).get('displayName'),
        'awayTeam': (away.get('team') or {}).get('displayName'),
        'startTime': ev.get('date'),
        'status': status_type.get('description') or '',
        'shortStatus': status_type.get('shortDetail') or '',
        'homeScore': _score(home.get('score')),
        'awayScore': _score(away.get('score')),
    }


def normalize_scoreboard(data) -> List[Dict[str, Any]]:
    if not isinstance(data, dict) or not isinstance(data.get('events'), list):
        return []
    return [normalize_event(ev) for ev in data['events'] if isinstance(ev, dict)]


class ScoreboardClient:
    """Thin ESPN scoreboard client returning normalised game records."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 15.0, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def scoreboard_url(self, sport: str, league: Optional[str] = None) -> Optional[str]:
        sport = (sport or '').lower()
        if sport == 'soccer':
            if not league:
                return None
            return f"{self.base_url}/soccer/{league}/scoreboard"
        path = SPORT_PATHS.get(sport)
        if path is None:
            raise UnknownSportError(sport)
        return f"{self.base_url}/{path}/scoreboard"

    def fetch_scoreboard(self, sport: str, league: Optional[str] = None,
                         date: Optional[str] = None) -> List[Dict[str, Any]]:
        """Games for sport/league on date. Raises ScoreLookupError on failure."""
        try:
            url = self.scoreboard_url(sport, league)
        except UnknownSportError as exc:
            raise ScoreLookupError(f"unknown sport {sport!r}") from exc
        if url is None:
            return []
        params = {}
        feed_date = to_feed_date(date)
        if feed_date:
            params['dates'] = feed_date
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ScoreLookupError(f"request to {url} failed: {exc}") from exc
        # The feed answers 404 for days without games
        if resp.status_code == 404:
            return []
        if resp.status_code >= 400:
            raise ScoreLookupError(f"{url} returned HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise ScoreLookupError(f"{url} returned a non-JSON body") from exc
        return normalize_scoreboard(data)

    def find_game(self, match) -> Optional[Dict[str, Any]]:
        """Current record for a room's match, or None when the feed does not list it."""
        games = self.fetch_scoreboard(match.sport, match.league, match.start_time)
        wanted = str(match.external_id)
        for game in games:
            if game.get('externalId') == wanted:
                return game
        return None

    def list_games(self, sport: str, league: Optional[str] = None,
                   date: Optional[str] = None) -> List[Dict[str, Any]]:
        """Forgiving listing for the HTTP API: failures become an empty list."""
        try:
            return self.fetch_scoreboard(sport, league, date)
        except ScoreLookupError as exc:
            logger.warning(f"[scores-error] sport={sport} league={league} date={date}: {exc}")
            return []
