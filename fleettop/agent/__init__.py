# fleettop/agent/__init__.py
from __future__ import annotations

from typing import Optional

from ..config import get_config
from .capture_log import CaptureLog
from .controller import CaptureController, CaptureState
from .sampler import Sampler

__all__ = ["CaptureLog", "CaptureController", "CaptureState", "Sampler", "get_capture_log", "get_capture_controller"]

_capture_log: Optional[CaptureLog] = None
_controller: Optional[CaptureController] = None


def get_capture_log() -> CaptureLog:
    global _capture_log
    if _capture_log is None:
        cfg = get_config()
        _capture_log = CaptureLog(cfg.storage.capture_path, strict=cfg.agent.strict_reads)
    return _capture_log


def get_capture_controller() -> CaptureController:
    global _controller
    if _controller is None:
        cfg = get_config()
        _controller = CaptureController(
            Sampler(disk_mount=cfg.agent.disk_mount),
            get_capture_log(),
            interval=cfg.agent.capture_interval,
        )
    return _controller
