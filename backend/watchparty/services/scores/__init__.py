from .espn import ScoreboardClient, ScoreLookupError, UnknownSportError

__all__ = ['ScoreboardClient', 'ScoreLookupError', 'UnknownSportError']
