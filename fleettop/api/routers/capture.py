# fleettop/api/routers/capture.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ...agent import CaptureController, get_capture_controller

router = APIRouter()


@router.post("/capture", response_class=PlainTextResponse)
def start_capture(controller: CaptureController = Depends(get_capture_controller)):
    controller.start()
    return "Started capturing metrics.\n"


@router.delete("/capture", response_class=PlainTextResponse)
def stop_capture(controller: CaptureController = Depends(get_capture_controller)):
    controller.stop()
    return "Stopped capturing metrics.\n"
