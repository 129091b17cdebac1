"""Messages to be signed, with an optional application tag."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Message:
    """A message; a tagged message is hashed behind its tag padded to 64 bytes."""

    data: bytes
    app_tag: str | None = None

    @classmethod
    def raw(cls, data: bytes) -> Message:
        """A message hashed as is, typically a pre-hashed value."""
        return cls(bytes(data))

    @classmethod
    def plain(cls, app_tag: str, data: bytes) -> Message:
        """A variable-length message separated from other applications by ``app_tag``."""
        tag_bytes = app_tag.encode()
        if len(tag_bytes) > 64:
            raise ValueError("tag must be 64 bytes or less")
        if not tag_bytes:
            raise ValueError("tag must not be empty")
        return cls(bytes(data), app_tag)

    def __len__(self) -> int:
        """Length of the message as it is hashed."""
        return len(self.data) + (64 if self.app_tag is not None else 0)

    def __bool__(self) -> bool:
        return True

    def hash_into(self, hasher: Any) -> None:
        if self.app_tag is not None:
            hasher.update(self.app_tag.encode().ljust(64, b"\x00"))
        hasher.update(self.data)