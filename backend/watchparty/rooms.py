import logging
import threading
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple

from watchparty.models import ACTIVE, CANCELLED, Bet, Match, Participant, Room
from watchparty.services import signaling
from watchparty.services.bets import ledger
from watchparty.services.bets.scoring import compute_outcome, is_finished

SYSTEM_SENDER = 'system'


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ''


class _Outbox:
    """Queues notifier calls made under the registry lock."""

    def __init__(self):
        self.calls = []

    def room_state(self, room: Room):
        # Snapshot now, while the state lock is held
        self.calls.append(('room_state', (room.key, room.snapshot())))

    def __getattr__(self, name):
        def _queue(*args):
            self.calls.append((name, args))
        return _queue


class RoomRegistry:
    """Owns every live room and is the only writer of room state.

    Each public method is one atomic step under the registry lock: it
    validates, mutates, then queues notifications which go out after the
    lock is released, in step order. Rejected calls return None/False and
    have no side effects.
    """

    def __init__(self, notifier, starting_credits: int = 1000,
                 private_prefix: str = 'private:', logger=None):
        self.notifier = notifier
        self.starting_credits = starting_credits
        self.private_prefix = private_prefix
        self.logger = logger or logging.getLogger(__name__)
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.RLock()
        self._emit_lock = threading.Lock()

    @contextmanager
    def _step(self):
        outbox = _Outbox()
        with self._lock:
            yield outbox
            # Taken before the state lock is released so steps flush in order
            self._emit_lock.acquire()
        try:
            for method, args in outbox.calls:
                getattr(self.notifier, method)(*args)
        finally:
            self._emit_lock.release()

    # ---- lookups ----

    def get(self, room_key) -> Optional[Room]:
        return self._rooms.get(room_key)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def snapshot(self, room_key) -> Optional[dict]:
        with self._lock:
            room = self._rooms.get(room_key)
            return room.snapshot() if room else None

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()

    # ---- membership ----

    def join(self, room_key, name, sid, match=None) -> Optional[Participant]:
        room_key, name = _clean(room_key), _clean(name)
        if not room_key or not name:
            return None
        with self._step() as out:
            room = self._rooms.get(room_key)
            if room is None:
                room = Room(key=room_key, media_allowed=room_key.startswith(self.private_prefix))
                self._rooms[room_key] = room
                self.logger.info(f"[room-open] room={room_key} media={room.media_allowed}")

            participant = room.participants.get(name)
            if participant is None:
                participant = Participant(name=name, credits=self.starting_credits, sid=sid)
                room.participants[name] = participant
            else:
                if participant.sid and participant.sid != sid:
                    out.unsubscribe(participant.sid, room_key)
                    # The new connection has not declared readiness yet
                    self._clear_ready(room, name, out)
                participant.sid = sid

            descriptor = match if isinstance(match, Match) else Match.from_dict(match)
            if descriptor is not None:
                room.match = descriptor

            out.subscribe(sid, room_key)
            out.chat(room_key, SYSTEM_SENDER, f"{name} joined")
            out.room_state(room)
            return participant

    def leave(self, room_key, sid) -> bool:
        with self._step() as out:
            room = self._rooms.get(_clean(room_key))
            if room is None:
                return False
            return self._drop_connection(room, sid, out)

    def disconnect(self, sid) -> List[str]:
        """Take sid offline in every room it is attached to."""
        touched = []
        with self._step() as out:
            for room in list(self._rooms.values()):
                if self._drop_connection(room, sid, out):
                    touched.append(room.key)
        return touched

    def _clear_ready(self, room: Room, name: str, out) -> None:
        if name in room.ready:
            room.ready.discard(name)
            out.to_room(room.key, 'peer_left', {'name': name})

    def _drop_connection(self, room: Room, sid, out) -> bool:
        if sid is None:
            return False
        leaving = [p for p in room.participants.values() if p.sid == sid]
        if not leaving:
            return False
        out.unsubscribe(sid, room.key)
        for participant in leaving:
            participant.sid = None
            self._clear_ready(room, participant.name, out)
            out.chat(room.key, SYSTEM_SENDER, f"{participant.name} left")
        out.room_state(room)
        self._close_if_disposable(room)
        return True

    def _close_if_disposable(self, room: Room) -> None:
        if room.is_disposable():
            del self._rooms[room.key]
            self.logger.info(f"[room-close] room={room.key}")

    # ---- chat ----

    def chat(self, room_key, name, text) -> bool:
        name = _clean(name)
        if not isinstance(text, str) or not text.strip():
            return False
        with self._step() as out:
            room = self._rooms.get(_clean(room_key))
            if room is None or name not in room.participants:
                return False
            out.chat(room.key, name, text)
            return True

    # ---- signaling ----

    def declare_ready(self, room_key, name, sid=None) -> Optional[list]:
        """Mark name ready for media. When sid is given it must be name's live handle."""
        name = _clean(name)
        with self._step() as out:
            room = self._rooms.get(_clean(room_key))
            if room is None or not signaling.can_signal(room, name):
                return None
            me = room.participants[name]
            if sid is not None and me.sid != sid:
                return None
            peers = signaling.mark_ready(room, name)
            out.to_sid(me.sid, 'media_peers', {'peers': peers})
            for entry in peers:
                other = room.participants.get(entry['name'])
                if other and other.sid:
                    out.to_sid(other.sid, 'peer_ready', {
                        'name': name,
                        'initiator': signaling.is_initiator(other.name, name),
                    })
            out.room_state(room)
            return peers

    def relay_signal(self, room_key, sender, recipient, payload) -> bool:
        with self._step() as out:
            room = self._rooms.get(_clean(room_key))
            if room is None:
                return False
            sid = signaling.relay_target(room, _clean(sender), _clean(recipient))
            if sid is None:
                return False
            out.to_sid(sid, 'signal', {'from': _clean(sender), 'payload': payload})
            return True

    # ---- bets ----

    def create_bet(self, room_key, creator, target, title, stake, pick) -> Optional[Bet]:
        with self._step() as out:
            room = self._rooms.get(_clean(room_key))
            if room is None:
                return None
            bet = ledger.create_bet_offer(room, creator, target, title, stake, pick)
            if bet is None:
                return None
            out.chat(room.key, SYSTEM_SENDER,
                     f"{bet.creator} offered {bet.target} a bet: {bet.title} "
                     f"({bet.creator_stake} on {bet.creator_pick})")
            out.room_state(room)
            return bet

    def accept_bet(self, room_key, bet_id, acceptor, pick, stake=None) -> Optional[Bet]:
        with self._step() as out:
            room = self._rooms.get(_clean(room_key))
            if room is None:
                return None
            bet = ledger.accept_bet_offer(room, bet_id, acceptor, pick, stake)
            if bet is None:
                return None
            out.chat(room.key, SYSTEM_SENDER,
                     f"{bet.target} accepted {bet.title} ({bet.target_stake} on {bet.target_pick})")
            out.room_state(room)
            return bet

    def cancel_bet(self, room_key, bet_id, requester) -> Optional[Bet]:
        with self._step() as out:
            room = self._rooms.get(_clean(room_key))
            if room is None:
                return None
            bet = ledger.request_cancel_bet(room, bet_id, requester)
            if bet is None:
                return None
            if bet.status == CANCELLED:
                text = f"{bet.title} was cancelled"
            else:
                text = f"{_clean(requester)} asked to cancel {bet.title}"
            out.chat(room.key, SYSTEM_SENDER, text)
            out.room_state(room)
            # A cancelled bet may have been the last thing keeping an empty room alive
            self._close_if_disposable(room)
            return bet

    # ---- settlement ----

    def settlement_candidates(self) -> List[Tuple[str, Match]]:
        """(room key, match) for every room holding at least one active bet."""
        with self._lock:
            return [
                (room.key, room.match)
                for room in self._rooms.values()
                if room.match is not None and room.bets_with_status(ACTIVE)
            ]

    def settle(self, room_key, record) -> List[Bet]:
        """Settle a room's active bets against a fetched game record.

        Status is re-read here, so bets cancelled since the candidates were
        collected are left alone.
        """
        with self._step() as out:
            room = self._rooms.get(room_key)
            if room is None or not record:
                return []
            status = record.get('status') or ''
            if not is_finished(status, record.get('shortStatus')):
                return []
            outcome = compute_outcome(record)
            if outcome is None:
                self.logger.info(f"[settle-skip] room={room_key} reason=no-score status={status!r}")
                return []
            settled = ledger.settle_active_bets(room, outcome, status)
            if not settled:
                return []
            for bet in settled:
                self.logger.info(f"[bet-settle] room={room_key} bet={bet.id} winner={bet.winner_name}")
            out.chat(room.key, SYSTEM_SENDER,
                     f"Final {outcome.home_score}-{outcome.away_score} ({outcome.pick}): "
                     f"{len(settled)} bet(s) settled")
            out.room_state(room)
            self._close_if_disposable(room)
            return settled
