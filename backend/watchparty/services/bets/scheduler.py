from watchparty import socketio
from watchparty.services.bets.scoring import is_finished
from watchparty.services.scores import ScoreLookupError


def run_settlement_cycle(app, registry=None, scores=None) -> int:
    """One pass over every room with active bets. Returns how many bets settled.

    Rooms are processed from a snapshot of (key, match) pairs taken under the
    registry lock; the feed is queried outside the lock and the registry
    re-checks bet status before settling. A failure in one room is logged and
    the pass moves on.
    """
    registry = registry or app.extensions['room_registry']
    scores = scores or app.extensions['score_client']
    settled_total = 0

    for room_key, match in registry.settlement_candidates():
        try:
            record = scores.find_game(match)
        except ScoreLookupError as exc:
            app.logger.warning(f"[settle-skip] room={room_key} match={match.external_id} lookup failed: {exc}")
            continue
        except Exception:
            app.logger.exception(f"[settle-error] room={room_key} match={match.external_id}")
            continue

        if record is None:
            app.logger.info(f"[settle-skip] room={room_key} match={match.external_id} not on scoreboard")
            continue
        if not is_finished(record.get('status'), record.get('shortStatus')):
            app.logger.debug(f"[settle-skip] room={room_key} match={match.external_id} status={record.get('status')!r}")
            continue

        try:
            settled = registry.settle(room_key, record)
        except Exception:
            app.logger.exception(f"[settle-error] room={room_key} match={match.external_id}")
            continue
        settled_total += len(settled)

    return settled_total


def start_settlement_loop(app):
    """Start the periodic auto-settlement task.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - No-ops when SETTLEMENT_INTERVAL_SEC <= 0
    - Only one loop per app
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return None
    interval = float(app.config.get('SETTLEMENT_INTERVAL_SEC', 15))
    if interval <= 0:
        app.logger.info("[settle-loop] disabled")
        return None
    if app.extensions.get('settlement_loop'):
        return app.extensions['settlement_loop']

    def _worker(delay: float):
        app.logger.info(f"[settle-loop] started interval={delay}s")
        while True:
            socketio.sleep(delay)
            with app.app_context():
                try:
                    count = run_settlement_cycle(app)
                except Exception:
                    app.logger.exception("[settle-loop] cycle failed")
                    continue
                if count:
                    app.logger.info(f"[settle-loop] settled={count}")

    task = socketio.start_background_task(_worker, interval)
    app.extensions['settlement_loop'] = task
    return task
