"""Error taxonomy shared by the engine and its collaborators."""

from __future__ import annotations


class GazelleError(Exception):
    """Base class for all errors raised while building a report."""


class MissingField(GazelleError):
    """Raised when a required key is absent from a source payload."""

    def __init__(self, name: str):
        super().__init__(f"Missing field {name!r}")
        self.name = name


class MalformedNumber(GazelleError):
    """Raised when a numeric field is present but cannot be parsed."""

    def __init__(self, value: object, field: str | None = None):
        where = f" in field {field!r}" if field else ""
        super().__init__(f"Malformed number{where}: {value!r}")
        self.value = value
        self.field = field


class DivisionByZero(GazelleError, ZeroDivisionError):
    """Raised when a ratio or share has a zero denominator."""


class VenueUnavailable(GazelleError):
    """Raised when a single liquidity venue's data could not be retrieved."""

    def __init__(self, venue: str, reason: str = ""):
        super().__init__(f"Venue {venue} unavailable: {reason}" if reason else venue)
        self.venue = venue
        self.reason = reason


class UpstreamUnavailable(GazelleError):
    """Raised when a collaborator transport fails."""

    def __init__(self, source: str, reason: str = ""):
        super().__init__(f"{source} unavailable: {reason}" if reason else source)
        self.source = source
        self.reason = reason
