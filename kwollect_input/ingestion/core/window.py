from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class FetchWindow:
    """[start, end) range requested from a source. Both instants are aware."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("FetchWindow instants must be timezone-aware")
        if self.end < self.start:
            raise ValueError("FetchWindow end must be >= start")


def wall_clock_now() -> datetime:
    return datetime.now(timezone.utc)
