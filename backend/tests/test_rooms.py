import threading

from conftest import RecordingNotifier
from watchparty.rooms import RoomRegistry
from watchparty.models import Match


MATCH = {'id': '42', 'sport': 'soccer', 'leagueKey': 'eng.1', 'startTime': '2026-10-19T19:00Z'}


def test_join_creates_room_with_media_flag_from_key(registry, notifier):
    registry.join('public:soccer:42', 'A', 'sid-a', MATCH)
    registry.join('private:abc', 'B', 'sid-b')

    assert registry.get('public:soccer:42').media_allowed is False
    assert registry.get('private:abc').media_allowed is True
    snap = registry.snapshot('public:soccer:42')
    assert snap['participants'] == [{'displayName': 'A', 'credits': 1000, 'online': True}]
    assert snap['match']['id'] == '42'
    assert ('sid-a', 'public:soccer:42') in notifier.subscriptions
    assert {'sender': 'system', 'text': 'A joined'} in notifier.of('chat', 'public:soccer:42')


def test_join_ignores_blank_room_or_name(registry, notifier):
    assert registry.join('   ', 'A', 'sid-a') is None
    assert registry.join('room', '  ', 'sid-a') is None
    assert registry.join(None, 'A', 'sid-a') is None
    assert registry.keys() == []
    assert notifier.events == []


def test_reconnect_keeps_identity_and_credits(registry):
    registry.join('room', 'A', 'sid-1')
    registry.get('room').participants['A'].credits = 750
    registry.join('room', 'B', 'sid-b')

    for n in range(3):
        registry.disconnect(f"sid-{n + 1}")
        registry.join('room', 'A', f"sid-{n + 2}")

    room = registry.get('room')
    assert list(room.participants) == ['A', 'B']
    assert room.participants['A'].credits == 750
    assert room.participants['A'].sid == 'sid-4'


def test_join_from_new_connection_replaces_old_handle(registry, notifier):
    registry.join('room', 'A', 'old')
    registry.join('room', 'A', 'new')
    assert ('old', 'room') not in notifier.subscriptions
    assert ('new', 'room') in notifier.subscriptions


def test_later_join_refreshes_match(registry):
    registry.join('room', 'A', 'sid-a', MATCH)
    registry.join('room', 'B', 'sid-b')
    assert registry.get('room').match.external_id == '42'
    registry.join('room', 'B', 'sid-b', dict(MATCH, startTime='2026-10-20T19:00Z'))
    assert registry.get('room').match.start_time == '2026-10-20T19:00Z'


def test_match_without_id_is_ignored():
    assert Match.from_dict({'sport': 'nba'}) is None
    assert Match.from_dict({'id': 7}) is None
    assert Match.from_dict('nope') is None
    assert Match.from_dict({'externalId': 7, 'sport': 'NBA'}).sport == 'nba'


def test_leave_marks_offline_and_keeps_record(registry):
    registry.join('room', 'A', 'sid-a')
    registry.join('room', 'B', 'sid-b')
    assert registry.leave('room', 'sid-a') is True

    snap = registry.snapshot('room')
    assert {'displayName': 'A', 'credits': 1000, 'online': False} in snap['participants']
    assert registry.leave('room', 'sid-a') is False


def test_room_deleted_when_empty_and_no_open_bets(registry):
    registry.join('room', 'A', 'sid-a')
    registry.leave('room', 'sid-a')
    assert registry.get('room') is None


def test_open_bet_keeps_empty_room_alive(registry):
    registry.join('room', 'A', 'sid-a')
    registry.join('room', 'B', 'sid-b')
    bet = registry.create_bet('room', 'A', 'B', 'Derby', 100, 'Home win')
    registry.disconnect('sid-a')
    registry.disconnect('sid-b')

    room = registry.get('room')
    assert room is not None
    assert room.online_count() == 0

    # Cancelling the only pending bet resolves it, so the room can go
    registry.cancel_bet('room', bet.id, 'B')
    assert registry.get('room') is None


def test_disconnect_is_checked_against_every_room(registry):
    registry.join('room-1', 'A', 'shared')
    registry.join('room-2', 'A', 'shared')
    registry.join('room-2', 'B', 'sid-b')

    touched = registry.disconnect('shared')

    assert sorted(touched) == ['room-1', 'room-2']
    assert registry.get('room-1') is None
    assert registry.get('room-2').participants['A'].online is False


def test_disconnect_unknown_sid_is_noop(registry, notifier):
    registry.join('room', 'A', 'sid-a')
    notifier.reset()
    assert registry.disconnect('ghost') == []
    assert notifier.events == []


def test_chat_is_relayed_verbatim_to_members_only(registry, notifier):
    registry.join('room', 'A', 'sid-a')
    notifier.reset()

    assert registry.chat('room', 'A', '  hello there ') is True
    assert registry.chat('room', 'A', '   ') is False
    assert registry.chat('room', 'Z', 'hi') is False
    assert registry.chat('nowhere', 'A', 'hi') is False

    assert notifier.of('chat') == [{'sender': 'A', 'text': '  hello there '}]


def test_chat_keeps_arrival_order(registry, notifier):
    registry.join('room', 'A', 'sid-a')
    registry.join('room', 'B', 'sid-b')
    notifier.reset()
    for i in range(5):
        registry.chat('room', 'A' if i % 2 else 'B', f"msg {i}")
    assert [m['text'] for m in notifier.of('chat')] == [f"msg {i}" for i in range(5)]


def test_every_mutation_broadcasts_latest_snapshot(registry, notifier):
    registry.join('room', 'A', 'sid-a')
    registry.join('room', 'B', 'sid-b')
    bet = registry.create_bet('room', 'A', 'B', 'Derby', 100, 'Home win')
    registry.accept_bet('room', bet.id, 'B', 'Away win', 100)

    last = notifier.of('room_state', 'room')[-1]
    assert last == registry.snapshot('room')
    assert last['bets'][0]['status'] == 'active'


def test_disconnect_drops_every_name_on_the_connection(registry, notifier):
    registry.join('room', 'a1', 'sid-1')
    registry.join('room', 'a2', 'sid-1')
    registry.join('room', 'b', 'sid-b')
    registry.leave('room', 'sid-b')
    assert registry.get('room') is not None

    assert registry.disconnect('sid-1') == ['room']

    assert registry.get('room') is None
    texts = [m['text'] for m in notifier.of('chat', 'room')]
    assert 'a1 left' in texts and 'a2 left' in texts


def test_leave_drops_every_name_on_the_connection(registry):
    registry.join('room', 'a1', 'sid-1')
    registry.join('room', 'a2', 'sid-1')
    registry.join('room', 'b', 'sid-b')

    registry.leave('room', 'sid-1')

    online = {p['displayName']: p['online'] for p in registry.snapshot('room')['participants']}
    assert online == {'a1': False, 'a2': False, 'b': True}


class _LockCheckingNotifier(RecordingNotifier):
    """Records, for each notification, whether another thread could take the registry lock."""

    def __init__(self):
        super().__init__()
        self.registry = None
        self.lock_free = []

    def _check(self):
        result = []

        def _try():
            got = self.registry._lock.acquire(blocking=False)
            if got:
                self.registry._lock.release()
            result.append(got)

        worker = threading.Thread(target=_try)
        worker.start()
        worker.join()
        self.lock_free.append(result[0])

    def chat(self, room_key, sender, text):
        self._check()
        super().chat(room_key, sender, text)

    def room_state(self, room_key, snapshot):
        self._check()
        super().room_state(room_key, snapshot)


def test_notifications_go_out_after_the_lock_is_released():
    notifier = _LockCheckingNotifier()
    registry = RoomRegistry(notifier)
    notifier.registry = registry

    registry.join('room', 'A', 'sid-a')
    registry.join('room', 'B', 'sid-b')
    bet = registry.create_bet('room', 'A', 'B', 'Derby', 100, 'Home win')
    registry.accept_bet('room', bet.id, 'B', 'Away win', 100)

    assert notifier.lock_free
    assert all(notifier.lock_free)
    # queued snapshots reflect the state at the time of each step
    statuses = [s['bets'][0]['status'] for s in notifier.of('room_state') if s['bets']]
    assert statuses == ['pending', 'active']


def test_rejected_step_sends_nothing(registry, notifier):
    registry.join('room', 'A', 'sid-a')
    notifier.reset()
    assert registry.create_bet('room', 'A', 'ghost', 'x', 10, 'draw') is None
    assert registry.leave('elsewhere', 'sid-a') is False
    assert notifier.events == []
