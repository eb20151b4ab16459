"""
Error taxonomy for the Kwollect ingestion path.

DecodeError      per record; the batch parser skips the record.
BatchError       per cycle; nothing to emit, the cycle ends cleanly.
FetchError       per cycle; surfaced to the host as a PollError.
MapError         per record; the point is dropped with a warning.

Slot contention and an empty slot are NOT errors.
"""


class KwollectError(Exception):
    """Base class for every error raised by kwollect_input."""

    pass


# -----------------------------
# Decoding
# -----------------------------
class DecodeError(KwollectError):
    """A JSON value could not be decoded into the record model."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"cannot decode field {field!r}")


class MissingField(DecodeError):
    def __init__(self, field: str) -> None:
        super().__init__(field, f"missing required field {field!r}")


class BadValue(DecodeError):
    def __init__(self, field: str, reason: str = "unrecognized JSON shape") -> None:
        self.reason = reason
        super().__init__(field, f"bad value for field {field!r}: {reason}")


class BadTimestamp(BadValue):
    """Neither an epoch number nor a parseable RFC-3339 string."""

    def __init__(self, reason: str = "expected epoch seconds or RFC-3339 string") -> None:
        super().__init__("timestamp", reason)


class UnsupportedShape(DecodeError):
    """Raised by the attribute decoder for objects, null and negative integers."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__("attribute", f"unsupported JSON shape: {kind}")


# -----------------------------
# Batch
# -----------------------------
class BatchError(KwollectError):
    pass


class NotAnArray(BatchError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"expected a JSON array of records, got {kind}")


# -----------------------------
# Transport
# -----------------------------
class FetchError(KwollectError):
    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(message)


class TransportError(FetchError):
    """Connect, timeout, TLS or non-2xx failure."""

    def __init__(self, url: str, cause: Exception) -> None:
        self.cause = cause
        super().__init__(url, f"request to {url} failed: {cause}")


class InvalidPayload(FetchError):
    def __init__(self, url: str, cause: Exception) -> None:
        self.cause = cause
        super().__init__(url, f"response from {url} is not valid JSON: {cause}")


# -----------------------------
# Mapping / polling
# -----------------------------
class MapError(KwollectError):
    pass


class PollError(KwollectError):
    """Fatal for the current poll cycle. The host decides what to do next."""

    pass
