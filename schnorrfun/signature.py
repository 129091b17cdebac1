"""BIP-340 style Schnorr signatures."""

from __future__ import annotations

from dataclasses import dataclass

from .curve import G, N, Point, random_scalar, scalar_from_bytes, scalar_to_bytes


@dataclass(frozen=True)
class Signature:
    """A Schnorr signature: the even-y nonce point ``R`` and the response ``s``."""

    R: Point
    s: int

    def __post_init__(self) -> None:
        if self.R.is_zero() or not self.R.has_even_y():
            raise ValueError("signature nonce must be a non-zero point with even y")
        if not 0 <= self.s < N:
            raise ValueError("signature scalar out of range")

    def to_bytes(self) -> bytes:
        """64 bytes: the nonce x coordinate followed by the scalar."""
        return self.R.to_xonly() + scalar_to_bytes(self.s)

    @classmethod
    def from_bytes(cls, data: bytes) -> Signature:
        data = bytes(data)
        if len(data) != 64:
            raise ValueError("a signature is 64 bytes")
        return cls(Point.from_xonly(data[:32]), scalar_from_bytes(data[32:]))

    @classmethod
    def from_hex(cls, text: str) -> Signature:
        return cls.from_bytes(bytes.fromhex(text))

    @classmethod
    def random(cls) -> Signature:
        """A uniformly random signature, valid for no message one could find."""
        R, _ = (random_scalar() * G).with_even_y()
        return cls(R, random_scalar())

    def __str__(self) -> str:
        return self.to_bytes().hex()