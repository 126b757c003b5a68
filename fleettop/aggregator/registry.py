# fleettop/aggregator/registry.py
from __future__ import annotations

from typing import List, Optional

import httpx
import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..db import session_scope
from ..errors import PersistError, ValidationError
from ..models import Server
from ..schemas import ServerRecord

log = structlog.get_logger()


class ServerRegistry:
    """Persisted list of remote agent endpoints."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._factory = session_factory

    def add(self, name: str, url: str) -> ServerRecord:
        name = (name or "").strip()
        url = (url or "").strip()
        if not name or not url:
            raise ValidationError("Missing name or URL")
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL:
            raise ValidationError(f"Invalid URL: {url!r}") from None
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ValidationError(f"Invalid URL: {url!r} must be an http(s) URL with a host")
        try:
            with session_scope(self._factory) as s:
                srv = Server(name=name, url=url.rstrip("/"))
                s.add(srv)
                s.flush()
                rec = ServerRecord(id=srv.id, name=srv.name, url=srv.url)
        except SQLAlchemyError as e:
            raise PersistError(f"failed to add server {name!r}: {e}") from e
        log.info("server_added", server_id=rec.id, name=rec.name, url=rec.url)
        return rec

    def list(self) -> List[ServerRecord]:
        with session_scope(self._factory) as s:
            rows = s.execute(select(Server).order_by(Server.id)).scalars()
            return [ServerRecord(id=r.id, name=r.name, url=r.url) for r in rows]
