from typing import Optional

from watchparty.models import (
    ACTIVE,
    CANCEL_PENDING,
    CANCELLED,
    PENDING,
    SETTLED,
    Bet,
    Room,
)
from .scoring import Outcome, resolve_winner


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ''


def parse_stake(value) -> Optional[float]:
    """Positive numeric stake, or None. Whole numbers come back as int."""
    if isinstance(value, bool):
        return None
    try:
        stake = float(value)
    except (TypeError, ValueError):
        return None
    if stake != stake or stake <= 0 or stake == float('inf'):
        return None
    return int(stake) if stake.is_integer() else stake


def create_bet_offer(room: Room, creator: str, target: str, title, stake, pick) -> Optional[Bet]:
    """Append a pending offer from creator to target.

    Both names must be participants of the room and distinct; the creator
    needs a pick and a positive stake. Returns None when rejected.
    """
    creator, target, pick = _clean(creator), _clean(target), _clean(pick)
    if not creator or not target or creator == target:
        return None
    if creator not in room.participants or target not in room.participants:
        return None
    amount = parse_stake(stake)
    if amount is None or not pick:
        return None
    bet = Bet(
        title=_clean(title) or f"{creator} vs {target}",
        creator=creator,
        target=target,
        creator_stake=amount,
        creator_pick=pick,
        target_stake=amount,
    )
    room.bets.append(bet)
    return bet


def accept_bet_offer(room: Room, bet_id, acceptor: str, pick, stake=None) -> Optional[Bet]:
    """Activate a pending bet; only its target may accept."""
    bet = room.find_bet(bet_id)
    pick = _clean(pick)
    if bet is None or bet.status != PENDING:
        return None
    if _clean(acceptor) != bet.target or not pick:
        return None
    amount = parse_stake(stake)
    bet.target_pick = pick
    bet.target_stake = amount if amount is not None else bet.creator_stake
    bet.status = ACTIVE
    return bet


def request_cancel_bet(room: Room, bet_id, requester: str) -> Optional[Bet]:
    """Record a cancel request.

    Pending offers cancel on either party's request. Accepted bets need both
    parties; the first request parks the bet in cancel_pending.
    """
    bet = room.find_bet(bet_id)
    if bet is None or not bet.is_open:
        return None
    party = bet.party_of(_clean(requester))
    if party is None:
        return None
    if party == 'creator':
        bet.creator_cancel = True
    else:
        bet.target_cancel = True

    if bet.status == PENDING:
        bet.status = CANCELLED
    elif bet.creator_cancel and bet.target_cancel:
        bet.status = CANCELLED
    else:
        bet.status = CANCEL_PENDING
    return bet


def settle_active_bets(room: Room, outcome: Outcome, external_status: str) -> list:
    """Settle every bet that is active right now against a final outcome."""
    settled = []
    for bet in room.bets_with_status(ACTIVE):
        bet.winner_name = resolve_winner(bet, outcome)
        bet.result = {
            'status': external_status,
            'score': {'home': outcome.home_score, 'away': outcome.away_score},
            'winningPick': outcome.pick,
        }
        bet.status = SETTLED
        settled.append(bet)
    return settled
