"""
Error taxonomy for Introspector.

Everything raised on purpose derives from IntrospectorError so callers can
catch at the turn boundary with a single except clause. Nothing here is
retried: a failure is reported once and the session stays usable.
"""

from __future__ import annotations


class IntrospectorError(Exception):
    """Base for all Introspector errors."""


class ProviderUnconfigured(IntrospectorError):
    """No API key is set for the selected backend."""

    def __init__(self, message: str = "No API key configured"):
        super().__init__(message)


class ProviderResponseError(IntrospectorError):
    """
    The backend was called but returned a failure or an unusable body.
    `detail` carries the raw backend text so it can be shown verbatim.
    """

    def __init__(self, detail: str, status_code: int | None = None):
        self.detail = detail
        self.status_code = status_code
        prefix = f"HTTP {status_code}: " if status_code else ""
        super().__init__(f"{prefix}{detail}")


class UnexpectedResponseShape(IntrospectorError):
    """A successful response did not hold the single text payload we expect."""


class InsufficientHistory(IntrospectorError):
    """finalize() was called before at least one full exchange."""


class SessionNotStarted(IntrospectorError):
    """A turn was requested before begin()."""


class SessionBusy(IntrospectorError):
    """A turn is already in flight for this session."""


class SessionFinished(IntrospectorError):
    """The session was already finalized; begin() starts a new one."""


class ConfigError(IntrospectorError, ValueError):
    """The config file holds a value that cannot be used."""
