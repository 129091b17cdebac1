"""Binonces: the pairs of public nonce points used in MuSig and FROST signing.

A binonce is derived from two secret scalars. A secret binonce must never be
used to sign twice, or the signing key can leak.
"""

from __future__ import annotations

from dataclasses import dataclass

from .curve import G, Point, scalar_from_bytes, scalar_to_bytes
from .message import Message
from .schnorr import NonceGen, derive_nonce

_ZERO_POINT_BYTES = bytes(33)


def _decode_point(data: bytes, allow_zero: bool) -> Point:
    if allow_zero and data == _ZERO_POINT_BYTES:
        return Point()
    return Point.from_bytes(data)


def _encode_point(point: Point) -> bytes:
    return _ZERO_POINT_BYTES if point.is_zero() else point.to_bytes()


@dataclass(frozen=True)
class Nonce:
    """A pair of public nonce points shared in the first round of signing."""

    points: tuple[Point, Point]

    def __post_init__(self) -> None:
        points = tuple(self.points)
        if len(points) != 2:
            raise ValueError("a binonce holds exactly two points")
        object.__setattr__(self, "points", points)

    @classmethod
    def from_bytes(cls, data: bytes, allow_zero: bool = False) -> Nonce:
        """Read two 33-byte compressed points.

        With ``allow_zero`` a run of 33 zero bytes is read as the point at infinity.
        """
        data = bytes(data)
        if len(data) != 66:
            raise ValueError("a public binonce is 66 bytes")
        return cls((_decode_point(data[:33], allow_zero), _decode_point(data[33:], allow_zero)))

    @classmethod
    def from_hex(cls, text: str, allow_zero: bool = False) -> Nonce:
        return cls.from_bytes(bytes.fromhex(text), allow_zero)

    def to_bytes(self) -> bytes:
        """66 bytes; a point at infinity is written as 33 zero bytes."""
        return b"".join(_encode_point(point) for point in self.points)

    def conditional_negate(self, needs_negation: bool) -> Nonce:
        """Return the pair with both points negated if ``needs_negation``."""
        return Nonce(tuple(p.conditional_negate(needs_negation) for p in self.points))

    def __str__(self) -> str:
        return self.to_bytes().hex()


@dataclass(frozen=True)
class NonceKeyPair:
    """Two secret nonce scalars together with their public binonce."""

    public: Nonce
    secret: tuple[int, int]

    @classmethod
    def from_secrets(cls, secrets: tuple[int, int]) -> NonceKeyPair:
        """Build the pair from two secret scalars."""
        r1, r2 = secrets
        return cls(Nonce((r1 * G, r2 * G)), (r1, r2))

    @classmethod
    def from_bytes(cls, data: bytes) -> NonceKeyPair:
        """Read two 32-byte non-zero scalars."""
        data = bytes(data)
        if len(data) != 64:
            raise ValueError("a secret binonce is 64 bytes")
        r1 = scalar_from_bytes(data[:32])
        r2 = scalar_from_bytes(data[32:])
        if r1 == 0 or r2 == 0:
            raise ValueError("secret nonces must be non-zero")
        return cls.from_secrets((r1, r2))

    @classmethod
    def from_hex(cls, text: str) -> NonceKeyPair:
        return cls.from_bytes(bytes.fromhex(text))

    def to_bytes(self) -> bytes:
        return b"".join(scalar_to_bytes(r) for r in self.secret)

    @classmethod
    def generate(
        cls,
        nonce_gen: NonceGen,
        secret: int,
        session_id: bytes,
        public_key: Point | None = None,
        message: Message | None = None,
    ) -> NonceKeyPair:
        """Derive a fresh nonce pair from the secret and the session's public data.

        With a deterministic ``nonce_gen`` the ``session_id`` must be unique for
        every signing session.
        """
        if message is None:
            message = Message.raw(b"")
        session_id = bytes(session_id)
        msg_len = len(message).to_bytes(8, "big")
        sid_len = len(session_id).to_bytes(8, "big")
        pk_bytes = public_key.to_bytes() if public_key is not None else _ZERO_POINT_BYTES
        r1, r2 = (
            derive_nonce(nonce_gen, secret, label, pk_bytes, msg_len, message, sid_len, session_id)
            for label in (b"r1", b"r2")
        )
        return cls.from_secrets((r1, r2))

    def __str__(self) -> str:
        return self.to_bytes().hex()