# mehu/domain/errors.py
from __future__ import annotations

from typing import Optional


class MehuError(RuntimeError):
    """Base class for errors raised by mehu itself."""


class TransportError(MehuError):
    """Network/HTTP failure while talking to the Bot API."""


class ApiError(TransportError):
    """The Bot API answered with ``ok: false``."""

    def __init__(self, method: str, description: str = "", error_code: Optional[int] = None) -> None:
        self.method = method
        self.description = description
        self.error_code = error_code
        super().__init__(f"{method} failed ({error_code}): {description}")


class MalformedResponse(TransportError):
    """The Bot API answered with something we could not decode."""


class NotFound(MehuError, LookupError):
    """A Store lookup missed where a row was expected."""


class ConstraintViolation(MehuError):
    """A write hit a uniqueness/foreign-key constraint the upsert path should have prevented."""


class StartupError(MehuError):
    """Missing or rejected credentials; raised before any loop starts."""


class PollerFailed(MehuError):
    """The poll loop died on an unexpected error instead of stopping on request."""
