import threading
import time

from fleettop.agent import CaptureController, CaptureState
from fleettop.errors import CollectionError
from fleettop.models import utcnow

from conftest import make_snapshot


def wait_for(cond, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if cond():
            return True
        time.sleep(0.01)
    return cond()


class FakeSampler:
    def __init__(self, fail_first=0):
        self.calls = 0
        self.fail_first = fail_first

    def capture(self):
        self.calls += 1
        if self.calls <= self.fail_first:
            raise CollectionError("process list unavailable")
        return make_snapshot(utcnow(), cpu=[float(self.calls)])


class BlockingSampler:
    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def capture(self):
        self.entered.set()
        self.release.wait(timeout=5)
        return make_snapshot(utcnow())


def test_initial_state_is_idle(capture_log):
    ctl = CaptureController(FakeSampler(), capture_log)
    assert ctl.state is CaptureState.IDLE
    assert not ctl.is_running


def test_start_and_stop_are_idempotent(capture_log):
    ctl = CaptureController(FakeSampler(), capture_log, interval=60)
    assert ctl.start() is True
    first = ctl._thread
    assert ctl.start() is False
    assert ctl._thread is first
    assert ctl.state is CaptureState.RUNNING

    assert ctl.stop() is True
    assert ctl.stop() is False
    assert ctl.state is CaptureState.IDLE
    ctl.join(timeout=5)
    assert not first.is_alive()


def test_loop_appends_until_stopped(capture_log):
    ctl = CaptureController(FakeSampler(), capture_log, interval=0.01)
    ctl.start()
    assert wait_for(lambda: len(capture_log.query()) >= 3)
    ctl.stop()
    ctl.join(timeout=5)

    count = len(capture_log.query())
    time.sleep(0.1)
    assert len(capture_log.query()) == count


def test_capture_failure_does_not_stop_loop(capture_log):
    sampler = FakeSampler(fail_first=2)
    ctl = CaptureController(sampler, capture_log, interval=0.01)
    ctl.start()
    assert wait_for(lambda: len(capture_log.query()) >= 1)
    ctl.stop()
    ctl.join(timeout=5)
    assert sampler.calls >= 3


def test_persist_failure_does_not_stop_loop(tmp_path):
    from fleettop.agent import CaptureLog

    # a directory where the file should be makes every append fail
    bad = tmp_path / "log"
    bad.mkdir()
    sampler = FakeSampler()
    ctl = CaptureController(sampler, CaptureLog(bad), interval=0.01)
    ctl.start()
    assert wait_for(lambda: sampler.calls >= 3)
    assert ctl.is_running
    ctl.stop()
    ctl.join(timeout=5)


def test_immediate_stop_captures_at_most_one_snapshot(capture_log):
    ctl = CaptureController(FakeSampler(), capture_log, interval=0.2)
    ctl.start()
    ctl.stop()
    ctl.join(timeout=5)
    assert len(capture_log.query()) <= 1
    assert ctl.state is CaptureState.IDLE

    stale = ctl._thread
    assert not stale.is_alive()
    assert ctl.start() is True
    assert ctl._thread is not stale
    assert ctl._thread.is_alive()
    ctl.stop()
    ctl.join(timeout=5)


def test_stop_does_not_wait_for_in_flight_sample(capture_log):
    sampler = BlockingSampler()
    ctl = CaptureController(sampler, capture_log, interval=60)
    ctl.start()
    assert sampler.entered.wait(timeout=5)

    t0 = time.monotonic()
    ctl.stop()
    assert time.monotonic() - t0 < 1.0
    assert ctl.state is CaptureState.IDLE

    sampler.release.set()
    ctl.join(timeout=5)
    assert not ctl._thread.is_alive()
    # the in-flight cycle still completes
    assert len(capture_log.query()) == 1


def test_concurrent_starts_run_a_single_loop(capture_log):
    ctl = CaptureController(FakeSampler(), capture_log, interval=60)
    results = []
    threads = [threading.Thread(target=lambda: results.append(ctl.start())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results.count(True) == 1
    ctl.stop()
    ctl.join(timeout=5)
