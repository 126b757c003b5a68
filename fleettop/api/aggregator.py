# fleettop/api/aggregator.py
from __future__ import annotations

from importlib.resources import files

import structlog
from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from ..aggregator import get_aggregator
from ..config import get_config
from ..db import init_db
from . import install_error_handlers
from .routers import servers as servers_router
from .routers import top as top_router

log = structlog.get_logger()

app = FastAPI(title="fleettop aggregator", version="0.1.0")
install_error_handlers(app)

app.include_router(servers_router.router, tags=["servers"])
app.include_router(top_router.router, tags=["top"])


@app.get("/", response_class=HTMLResponse, include_in_schema=False)
def dashboard():
    return files("fleettop.api").joinpath("static/index.html").read_text(encoding="utf-8")


@app.on_event("startup")
def on_startup():
    cfg = get_config()
    # an unusable store is fatal here
    init_db()
    log.info("aggregator_db_ready", path=str(cfg.storage.db_path))
    if cfg.aggregator.poll_on_start:
        get_aggregator().start()


@app.on_event("shutdown")
def on_shutdown():
    get_aggregator().close()
