# fleettop/api/agent.py
from __future__ import annotations

import structlog
from fastapi import FastAPI

from ..agent import get_capture_controller
from ..config import get_config
from . import install_error_handlers
from .routers import capture as capture_router
from .routers import view as view_router

log = structlog.get_logger()

app = FastAPI(title="fleettop capture agent", version="0.1.0")
install_error_handlers(app)

app.include_router(capture_router.router, tags=["capture"])
app.include_router(view_router.router, tags=["view"])


@app.on_event("startup")
def on_startup():
    cfg = get_config()
    log.info("agent_starting", capture_file=str(cfg.storage.capture_path))
    if cfg.agent.capture_on_start:
        get_capture_controller().start()


@app.on_event("shutdown")
def on_shutdown():
    get_capture_controller().stop()
