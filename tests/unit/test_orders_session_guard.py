import threading

from tailormint.orders.session_guard import COMPLETED, IN_PROGRESS, PROCEED, ProcessedSessionGuard


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_begin_then_record_then_replay():
    guard = ProcessedSessionGuard(window_seconds=60, clock=_Clock())
    assert guard.begin("cs_1") == (PROCEED, None)
    assert guard.begin("cs_1") == (IN_PROGRESS, None)
    guard.record("cs_1", {"order_id": "o1"})
    assert guard.begin("cs_1") == (COMPLETED, {"order_id": "o1"})


def test_entries_expire_after_window():
    clock = _Clock()
    guard = ProcessedSessionGuard(window_seconds=60, clock=clock)
    guard.begin("cs_1")
    guard.record("cs_1", {"order_id": "o1"})
    clock.now += 61
    assert len(guard) == 0
    assert guard.begin("cs_1") == (PROCEED, None)


def test_discard_and_clear():
    guard = ProcessedSessionGuard(window_seconds=60, clock=_Clock())
    guard.begin("cs_1")
    guard.discard("cs_1")
    assert guard.begin("cs_1") == (PROCEED, None)
    guard.begin("cs_2")
    assert len(guard) == 2
    guard.clear()
    assert len(guard) == 0


def test_replayed_outcome_is_a_copy():
    guard = ProcessedSessionGuard(window_seconds=60, clock=_Clock())
    guard.record("cs_1", {"order_id": "o1"})
    _, outcome = guard.begin("cs_1")
    outcome["order_id"] = "tampered"
    assert guard.begin("cs_1") == (COMPLETED, {"order_id": "o1"})


def test_only_one_thread_proceeds():
    guard = ProcessedSessionGuard(window_seconds=60)
    n = 10
    barrier = threading.Barrier(n)
    states = []
    lock = threading.Lock()

    def _run():
        barrier.wait()
        state, _ = guard.begin("cs_1")
        with lock:
            states.append(state)

    threads = [threading.Thread(target=_run) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert states.count(PROCEED) == 1
    assert states.count(IN_PROGRESS) == n - 1
