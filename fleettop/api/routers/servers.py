# fleettop/api/routers/servers.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Form
from fastapi.responses import RedirectResponse

from ...aggregator import ServerRegistry, get_registry
from ...schemas import ServerRecord

router = APIRouter()


@router.post("/add-server")
def add_server(
    name: str = Form(""),
    url: str = Form(""),
    registry: ServerRegistry = Depends(get_registry),
):
    registry.add(name, url)
    return RedirectResponse("/", status_code=303)


@router.get("/servers", response_model=List[ServerRecord])
def list_servers(registry: ServerRegistry = Depends(get_registry)):
    return registry.list()
