# fleettop/models.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import String, Integer, Float, DateTime, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(ts: datetime) -> datetime:
    """SQLite drops tzinfo, so every stored or compared instant is UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class Base(DeclarativeBase):
    pass


class Server(Base):
    __tablename__ = "servers"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String)
    url: Mapped[str] = mapped_column(String)


class ProcessSampleRow(Base):
    """One process seen in one agent snapshot, tagged with the polled server."""
    __tablename__ = "process_samples"
    __table_args__ = (
        UniqueConstraint("server_id", "pid", "timestamp", name="uq_process_samples_server_pid_ts"),
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    pid: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String, default="")
    cpu: Mapped[float] = mapped_column(Float, default=0.0)
    memory: Mapped[float] = mapped_column(Float, default=0.0)
    # weak reference to servers.id, used only for filtering
    server_id: Mapped[int] = mapped_column(Integer)


Index("ix_process_samples_server_ts", ProcessSampleRow.server_id, ProcessSampleRow.timestamp)
