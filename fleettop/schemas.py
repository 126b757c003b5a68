# fleettop/schemas.py
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


_NANOS = re.compile(r"(\.\d{6})\d+")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ProcessSample(_Frozen):
    pid: int
    name: str = ""
    cpu_percent: float = Field(default=0.0, alias="cpu")
    memory_percent: float = Field(default=0.0, alias="memory")


class MemoryStats(_Frozen):
    total: int = 0
    available: int = 0
    used: int = 0
    free: int = 0
    used_percent: float = Field(default=0.0, alias="usedPercent")


class DiskStats(_Frozen):
    path: str = "/"
    total: int = 0
    free: int = 0
    used: int = 0
    used_percent: float = Field(default=0.0, alias="usedPercent")


class MetricSnapshot(_Frozen):
    """One point-in-time capture of system and per-process metrics."""

    timestamp: datetime
    cpu_percentages: List[float] = Field(default_factory=list, alias="cpu")
    memory: MemoryStats = Field(default_factory=MemoryStats)
    disk: DiskStats = Field(default_factory=DiskStats)
    processes: List[ProcessSample] = Field(default_factory=list)

    @field_validator("cpu_percentages", "processes", mode="before")
    @classmethod
    def _null_as_empty(cls, v):
        # Go agents encode empty slices as null
        return [] if v is None else v

    @field_validator("memory", "disk", mode="before")
    @classmethod
    def _null_as_default(cls, v):
        return {} if v is None else v

    @field_validator("timestamp", mode="before")
    @classmethod
    def _trim_nanos(cls, v):
        # Go emits nanosecond fractions; keep microseconds
        if isinstance(v, str):
            return _NANOS.sub(r"\1", v)
        return v

    @field_validator("timestamp")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class ServerRecord(BaseModel):
    id: int
    name: str
    url: str


class ProcessInfo(BaseModel):
    pid: int
    name: str
    cpu: float
    memory: float
