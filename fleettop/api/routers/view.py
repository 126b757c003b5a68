# fleettop/api/routers/view.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from ...agent import CaptureLog, get_capture_log
from ...durations import parse_duration
from ...errors import InvalidArgument
from ...models import utcnow
from ...schemas import MetricSnapshot

router = APIRouter()


@router.get("/view", response_model=List[MetricSnapshot])
def view(duration: str = Query(""), capture_log: CaptureLog = Depends(get_capture_log)):
    try:
        span = parse_duration(duration)
    except InvalidArgument:
        raise InvalidArgument("Invalid duration format") from None
    return capture_log.query(since=utcnow() - span)
