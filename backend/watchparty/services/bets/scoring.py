import re
from dataclasses import dataclass
from typing import Optional

BOTH_RIGHT = 'Both right'
BOTH_WRONG = 'Both wrong'

# Status texts seen on finished games: "Full Time", "FT", "FT-Pens", "Final",
# "Final/OT", "Closed". Anything else is treated as still in play.
_FINISHED_RE = re.compile(r'\b(full[\s-]?time|ft|final|closed)\b', re.IGNORECASE)


@dataclass(frozen=True)
class Outcome:
    pick: str
    side: str  # home, away or draw
    home_score: int
    away_score: int


def is_finished(*statuses) -> bool:
    return any(isinstance(s, str) and _FINISHED_RE.search(s) for s in statuses)


def _as_score(value) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value) if float(value).is_integer() else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def compute_outcome(record) -> Optional[Outcome]:
    """Winning pick for a game record, or None when either score is unusable."""
    home = _as_score(record.get('homeScore'))
    away = _as_score(record.get('awayScore'))
    if home is None or away is None:
        return None
    home_team = record.get('homeTeam') or 'Home'
    away_team = record.get('awayTeam') or 'Away'
    if away > home:
        return Outcome(f"{away_team} win", 'away', home, away)
    if home > away:
        return Outcome(f"{home_team} win", 'home', home, away)
    return Outcome('draw', 'draw', home, away)


def pick_matches(pick, outcome: Outcome) -> bool:
    """True when a free-text pick names the outcome.

    Accepts the outcome text itself, the side label ("home win") and "tie"
    for draws, compared case-insensitively.
    """
    if not isinstance(pick, str):
        return False
    normalized = ' '.join(pick.lower().split())
    if not normalized:
        return False
    accepted = {outcome.pick.lower()}
    if outcome.side == 'draw':
        accepted.update({'draw', 'tie'})
    else:
        accepted.add(f"{outcome.side} win")
    return normalized in accepted


def resolve_winner(bet, outcome: Outcome) -> str:
    creator_right = pick_matches(bet.creator_pick, outcome)
    target_right = pick_matches(bet.target_pick, outcome)
    if creator_right and target_right:
        return BOTH_RIGHT
    if creator_right:
        return bet.creator
    if target_right:
        return bet.target
    return BOTH_WRONG
