# fleettop/api/__init__.py
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import FleetTopError, ValidationError


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(FleetTopError)
    async def _internal_error(request: Request, exc: FleetTopError):
        return JSONResponse(status_code=500, content={"detail": f"{type(exc).__name__}: {exc}"})
