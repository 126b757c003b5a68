# fleettop/aggregator/poller.py
from __future__ import annotations

import threading
from datetime import timedelta
from typing import Dict, List, Optional

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..durations import format_duration
from ..errors import DecodeError, PersistError, TransportError
from ..schemas import MetricSnapshot, ServerRecord
from .registry import ServerRegistry
from .store import ProcessSampleStore

log = structlog.get_logger()

_SNAPSHOTS = TypeAdapter(Optional[List[MetricSnapshot]])


class Aggregator:
    """Polls every registered agent's /view window and stores its process samples."""

    def __init__(
        self,
        registry: ServerRegistry,
        store: ProcessSampleStore,
        window: timedelta = timedelta(minutes=1),
        interval: float = 60.0,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.registry = registry
        self.store = store
        self.window = window
        self.interval = interval
        self._client = client or httpx.Client(timeout=timeout)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ---------- Fetching ----------

    def fetch(self, server: ServerRecord) -> List[MetricSnapshot]:
        url = server.url.rstrip("/") + "/view"
        try:
            r = self._client.get(url, params={"duration": format_duration(self.window)})
            r.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"{server.name}: {e}") from e
        try:
            return _SNAPSHOTS.validate_json(r.content) or []
        except PydanticValidationError as e:
            raise DecodeError(f"{server.name}: malformed /view payload") from e

    def poll_once(self) -> Dict[int, Optional[int]]:
        """One polling cycle. Returns rows inserted per server id, None where the server failed."""
        report: Dict[int, Optional[int]] = {}
        try:
            servers = self.registry.list()
        except Exception as e:
            log.error("server_list_failed", error=str(e))
            return report

        for server in servers:
            try:
                snapshots = self.fetch(server)
            except (TransportError, DecodeError) as e:
                log.warning("server_fetch_failed", server=server.name, server_id=server.id, error=str(e))
                report[server.id] = None
                continue
            try:
                inserted = self.store.insert(server.id, snapshots)
            except PersistError as e:
                log.error("process_samples_persist_failed", server=server.name, error=str(e))
                report[server.id] = None
                continue
            log.info("server_polled", server=server.name, snapshots=len(snapshots), rows=inserted)
            report[server.id] = inserted
        return report

    # ---------- Loop ----------

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop, args=(self._stop_event,), daemon=True, name="aggregator-poll"
        )
        self._thread.start()
        log.info("aggregator_started", interval=self.interval, window=format_duration(self.window))

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def close(self) -> None:
        self.stop()
        self._client.close()

    def _loop(self, stop_event: threading.Event) -> None:
        # first cycle after one interval, like a ticker
        while not stop_event.wait(timeout=self.interval):
            try:
                self.poll_once()
            except Exception:
                log.exception("poll_cycle_crashed")
