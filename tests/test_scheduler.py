import threading

from posetrack.core.scheduler import TickScheduler


def test_run_once_steps_callback():
    calls = []
    s = TickScheduler(lambda: calls.append(1) or len(calls))
    assert s.run_once() == 1
    assert s.run_once() == 2
    assert s.ticks == 2


def test_errors_are_counted_not_raised():
    def boom():
        raise RuntimeError("tick failed")

    s = TickScheduler(boom)
    assert s.run_once() is None
    assert s.errors == 1


def test_stop_cancels_pending_ticks():
    calls = []
    s = TickScheduler(lambda: calls.append(1))
    s.stop()
    assert s.cancelled
    assert s.run_once() is None
    assert calls == []


def test_loop_with_fake_clock_and_wait():
    waits = []
    s = None

    def tick():
        if s.ticks >= 3:
            s.stop()

    def fake_wait(timeout):
        waits.append(timeout)
        return False

    t = [0.0]

    def fake_clock():
        t[0] += 0.01
        return t[0]

    s = TickScheduler(tick, interval_sec=0.05, clock=fake_clock, wait=fake_wait)
    s._loop()

    assert s.ticks == 3
    # each tick "took" 10ms of a 50ms interval
    assert all(abs(w - 0.04) < 1e-9 for w in waits)


def test_thread_start_and_stop():
    ticked = threading.Event()
    s = TickScheduler(ticked.set, interval_sec=0.001)
    s.start()
    assert ticked.wait(2.0)
    s.stop(timeout=2.0)
    assert not s.is_running
    assert s.cancelled
