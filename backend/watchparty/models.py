import itertools
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

# Bet statuses
PENDING = 'pending'
ACTIVE = 'active'
CANCEL_PENDING = 'cancel_pending'
CANCELLED = 'cancelled'
SETTLED = 'settled'

OPEN_STATUSES = frozenset({PENDING, ACTIVE, CANCEL_PENDING})
TERMINAL_STATUSES = frozenset({CANCELLED, SETTLED})

_bet_seq = itertools.count(1)


def generate_bet_id() -> str:
    """Unique, roughly creation-ordered bet id."""
    return f"b{int(time.time() * 1000)}-{next(_bet_seq)}"


def _first(data: Dict[str, Any], *keys):
    for key in keys:
        value = data.get(key)
        if value not in (None, ''):
            return value
    return None


@dataclass
class Match:
    external_id: str
    sport: str
    league: Optional[str] = None
    league_name: Optional[str] = None
    country: Optional[str] = None
    start_time: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data) -> Optional['Match']:
        """Build a Match from a client payload; None when id or sport is missing."""
        if not isinstance(data, dict):
            return None
        external_id = _first(data, 'id', 'externalId', 'eventId')
        sport = _first(data, 'sport', 'sportKey')
        if external_id is None or not sport:
            return None
        return cls(
            external_id=str(external_id),
            sport=str(sport).strip().lower(),
            league=_first(data, 'leagueKey', 'league'),
            league_name=_first(data, 'leagueName', 'leagueLabel'),
            country=_first(data, 'country'),
            start_time=_first(data, 'startTime', 'date'),
            name=_first(data, 'name'),
        )

    def to_dict(self):
        return {
            'id': self.external_id,
            'sport': self.sport,
            'leagueKey': self.league,
            'leagueName': self.league_name,
            'country': self.country,
            'startTime': self.start_time,
            'name': self.name,
        }


@dataclass
class Participant:
    name: str
    credits: int
    sid: Optional[str] = None

    @property
    def online(self) -> bool:
        return self.sid is not None

    def to_dict(self):
        return {
            'displayName': self.name,
            'credits': self.credits,
            'online': self.online,
        }


@dataclass
class Bet:
    title: str
    creator: str
    target: str
    creator_stake: float
    creator_pick: str
    target_stake: float
    target_pick: str = ''
    id: str = field(default_factory=generate_bet_id)
    status: str = PENDING
    creator_cancel: bool = False
    target_cancel: bool = False
    winner_name: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    created_at: float = field(default_factory=time.time)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def party_of(self, name: str) -> Optional[str]:
        if name == self.creator:
            return 'creator'
        if name == self.target:
            return 'target'
        return None

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'creator': self.creator,
            'target': self.target,
            'creatorStake': self.creator_stake,
            'creatorPick': self.creator_pick,
            'targetStake': self.target_stake,
            'targetPick': self.target_pick,
            'cancelConsent': {'creator': self.creator_cancel, 'target': self.target_cancel},
            'status': self.status,
            'winnerName': self.winner_name,
            'result': self.result,
            'createdAt': self.created_at,
        }


@dataclass
class Room:
    key: str
    media_allowed: bool
    participants: Dict[str, Participant] = field(default_factory=dict)
    bets: List[Bet] = field(default_factory=list)
    match: Optional[Match] = None
    ready: Set[str] = field(default_factory=set)

    def find_bet(self, bet_id) -> Optional[Bet]:
        for bet in self.bets:
            if bet.id == bet_id:
                return bet
        return None

    def bets_with_status(self, status: str) -> List[Bet]:
        return [b for b in self.bets if b.status == status]

    def has_open_bets(self) -> bool:
        return any(b.is_open for b in self.bets)

    def online_count(self) -> int:
        return sum(1 for p in self.participants.values() if p.online)

    def is_disposable(self) -> bool:
        """A room may be dropped once nobody is online and no bet is unresolved."""
        return self.online_count() == 0 and not self.has_open_bets()

    def snapshot(self):
        return {
            'roomKey': self.key,
            'participants': [p.to_dict() for p in self.participants.values()],
            'bets': [b.to_dict() for b in self.bets],
            'match': self.match.to_dict() if self.match else None,
            'mediaAllowed': self.media_allowed,
            'readyIdentities': sorted(self.ready),
        }
