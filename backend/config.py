import os


def _origins():
    origins = [
        os.environ.get('FRONTEND_URL'),
        "http://localhost:3000",
        "http://localhost:3001",
    ]
    return [o for o in origins if o]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = _origins()
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', '3000'))
    # Credits handed to a participant the first time they join a room
    STARTING_CREDITS = int(os.environ.get('STARTING_CREDITS', '1000'))
    # Room keys starting with this prefix allow webcam/mic signaling
    PRIVATE_ROOM_PREFIX = os.environ.get('PRIVATE_ROOM_PREFIX', 'private:')
    # Auto-settlement loop period (seconds). 0 disables.
    SETTLEMENT_INTERVAL_SEC = float(os.environ.get('SETTLEMENT_INTERVAL_SEC', '15'))
    # Upper bound for one score feed request (seconds)
    SCORE_FETCH_TIMEOUT_SEC = float(os.environ.get('SCORE_FETCH_TIMEOUT_SEC', '15'))
    ESPN_BASE_URL = os.environ.get('ESPN_BASE_URL', 'https://site.api.espn.com/apis/site/v2/sports')
