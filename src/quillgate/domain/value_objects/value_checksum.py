"""Checksum of configuration values for tamper detection."""

import hashlib
from dataclasses import dataclass


@dataclass(frozen=True)
class ValueChecksum:
    """SHA-256 hex digest of a configuration value."""

    value: str

    def __post_init__(self) -> None:
        if len(self.value) != 64:
            raise ValueError("SHA-256 checksum must be 64 hex characters")

    @classmethod
    def of(cls, text: str | None) -> "ValueChecksum":
        return cls(hashlib.sha256((text or "").encode("utf-8")).hexdigest())

    def matches(self, text: str | None) -> bool:
        return ValueChecksum.of(text) == self
