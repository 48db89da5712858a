"""Validity window for time-bounded grants and rules."""

from dataclasses import dataclass
from datetime import datetime

from quillgate.domain.exceptions import InvalidWindow


@dataclass(frozen=True)
class ValidityWindow:
    """Closed interval [start, end]; end None means open-ended."""

    start: datetime
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.end is not None and self.start > self.end:
            raise InvalidWindow(
                f"Window start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    def contains(self, as_of: datetime) -> bool:
        """Both bounds are inclusive."""
        if as_of < self.start:
            return False
        return self.end is None or as_of <= self.end

    def is_pending(self, as_of: datetime) -> bool:
        return as_of < self.start

    def is_expired(self, as_of: datetime) -> bool:
        return self.end is not None and as_of > self.end
