# fleettop/errors.py
from __future__ import annotations


class FleetTopError(Exception):
    """Base class for fleettop failures."""


class CollectionError(FleetTopError):
    """OS-level aggregate metrics (CPU, memory, disk, process list) could not be read."""


class PersistError(FleetTopError):
    """A snapshot could not be appended or a row could not be inserted."""


class ValidationError(FleetTopError, ValueError):
    """Malformed client input."""


class InvalidArgument(ValidationError):
    pass


class TransportError(FleetTopError):
    """Fetching a window from an agent failed (network, non-2xx status)."""


class DecodeError(FleetTopError):
    """A persisted record or a fetched payload could not be decoded."""
