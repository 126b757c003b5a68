# fleettop/agent/controller.py
from __future__ import annotations

import enum
import threading
from typing import Optional

import structlog

from ..errors import CollectionError, PersistError
from .capture_log import CaptureLog
from .sampler import Sampler

log = structlog.get_logger()


class CaptureState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


class CaptureController:
    """Start/stop state machine driving the periodic Sampler -> CaptureLog loop.

    The lock guards only the state check/flip. Each start() hands the new loop
    its own stop event, so a stale loop can never be resumed by a later start().
    """

    def __init__(self, sampler: Sampler, capture_log: CaptureLog, interval: float = 10.0):
        self.sampler = sampler
        self.capture_log = capture_log
        self.interval = interval
        self._lock = threading.Lock()
        self._state = CaptureState.IDLE
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> CaptureState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state is CaptureState.RUNNING

    def start(self) -> bool:
        """Idle -> Running. Returns False if a loop was already running."""
        with self._lock:
            if self._state is CaptureState.RUNNING:
                return False
            self._state = CaptureState.RUNNING
            stop_event = threading.Event()
            self._stop_event = stop_event
            self._thread = threading.Thread(
                target=self._loop, args=(stop_event,), daemon=True, name="capture-loop"
            )
            self._thread.start()
        log.info("capture_started", interval=self.interval)
        return True

    def stop(self) -> bool:
        """Running -> Idle. Returns False if already idle. Never waits for an in-flight sample."""
        with self._lock:
            if self._state is CaptureState.IDLE:
                return False
            self._state = CaptureState.IDLE
            if self._stop_event is not None:
                self._stop_event.set()
        log.info("capture_stopped")
        return True

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the most recently started loop thread to exit."""
        with self._lock:
            thread = self._thread
        if thread is not None:
            thread.join(timeout=timeout)

    def run_once(self) -> bool:
        """One capture/append cycle. Failures are logged, never raised."""
        try:
            snap = self.sampler.capture()
        except CollectionError as e:
            log.error("capture_failed", error=str(e))
            return False
        try:
            self.capture_log.append(snap)
        except PersistError as e:
            log.error("snapshot_persist_failed", error=str(e))
            return False
        log.info("snapshot_appended", timestamp=snap.timestamp.isoformat(), processes=len(snap.processes))
        return True

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                log.exception("capture_cycle_crashed")
            stop_event.wait(timeout=self.interval)
