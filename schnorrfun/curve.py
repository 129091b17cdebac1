"""Arithmetic on the secp256k1 curve, scalar encoding and tagged hashes."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from typing import Any

P = 2**256 - 2**32 - 977
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_GX = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
_GY = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8

_Jacobian = tuple[int, int, int]
_INFINITY: _Jacobian = (0, 1, 0)


def _jac_double(p: _Jacobian) -> _Jacobian:
    x, y, z = p
    if z == 0 or y == 0:
        return _INFINITY
    a = x * x % P
    b = y * y % P
    c = b * b % P
    d = 2 * ((x + b) ** 2 - a - c) % P
    e = 3 * a % P
    f = e * e % P
    x3 = (f - 2 * d) % P
    y3 = (e * (d - x3) - 8 * c) % P
    z3 = 2 * y * z % P
    return (x3, y3, z3)


def _jac_add(p: _Jacobian, q: _Jacobian) -> _Jacobian:
    x1, y1, z1 = p
    x2, y2, z2 = q
    if z1 == 0:
        return q
    if z2 == 0:
        return p
    z1z1 = z1 * z1 % P
    z2z2 = z2 * z2 % P
    u1 = x1 * z2z2 % P
    u2 = x2 * z1z1 % P
    s1 = y1 * z2 * z2z2 % P
    s2 = y2 * z1 * z1z1 % P
    if u1 == u2:
        if s1 != s2:
            return _INFINITY
        return _jac_double(p)
    h = (u2 - u1) % P
    r = (s2 - s1) % P
    h2 = h * h % P
    h3 = h * h2 % P
    u1h2 = u1 * h2 % P
    x3 = (r * r - h3 - 2 * u1h2) % P
    y3 = (r * (u1h2 - x3) - s1 * h3) % P
    z3 = h * z1 * z2 % P
    return (x3, y3, z3)


def _to_affine(p: _Jacobian) -> Point:
    x, y, z = p
    if z == 0:
        return Point()
    zi = pow(z, -1, P)
    zi2 = zi * zi % P
    return Point(x * zi2 % P, y * zi2 * zi % P)


def _lift_x(x: int) -> int | None:
    """Return the even y coordinate for ``x``, or None if ``x`` is not on the curve."""
    if not 0 <= x < P:
        return None
    c = (pow(x, 3, P) + 7) % P
    y = pow(c, (P + 1) // 4, P)
    if y * y % P != c:
        return None
    return y if y % 2 == 0 else P - y


@dataclass(frozen=True)
class Point:
    """An affine point on secp256k1; ``Point()`` is the point at infinity."""

    x: int | None = None
    y: int | None = None

    def __post_init__(self) -> None:
        if (self.x is None) != (self.y is None):
            raise ValueError("a point needs both coordinates or neither")
        if self.x is None:
            return
        if not (0 <= self.x < P and 0 <= self.y < P):
            raise ValueError("coordinate out of range")
        if (self.y * self.y - pow(self.x, 3, P) - 7) % P != 0:
            raise ValueError("point is not on the curve")

    @classmethod
    def from_bytes(cls, data: bytes) -> Point:
        """Decode a 33-byte compressed point."""
        data = bytes(data)
        if len(data) != 33 or data[0] not in (2, 3):
            raise ValueError("expected 33 bytes starting with 0x02 or 0x03")
        x = int.from_bytes(data[1:], "big")
        y = _lift_x(x)
        if y is None:
            raise ValueError("bytes do not encode a point on the curve")
        if data[0] == 3:
            y = P - y
        return cls(x, y)

    @classmethod
    def from_xonly(cls, data: bytes) -> Point:
        """Decode 32 bytes of x coordinate into the point with an even y."""
        data = bytes(data)
        if len(data) != 32:
            raise ValueError("expected 32 bytes")
        x = int.from_bytes(data, "big")
        y = _lift_x(x)
        if y is None:
            raise ValueError("bytes do not encode a point on the curve")
        return cls(x, y)

    def _require_nonzero(self) -> None:
        if self.x is None:
            raise ValueError("the point at infinity has no encoding")

    def to_bytes(self) -> bytes:
        """The 33-byte compressed encoding."""
        self._require_nonzero()
        return bytes([3 if self.y % 2 else 2]) + self.x.to_bytes(32, "big")

    def to_xonly(self) -> bytes:
        """The 32-byte x coordinate."""
        self._require_nonzero()
        return self.x.to_bytes(32, "big")

    def is_zero(self) -> bool:
        return self.x is None

    def has_even_y(self) -> bool:
        self._require_nonzero()
        return self.y % 2 == 0

    def with_even_y(self) -> tuple[Point, bool]:
        """Return the even-y version of this point and whether it had to be negated."""
        needs_negation = not self.has_even_y()
        return self.conditional_negate(needs_negation), needs_negation

    def conditional_negate(self, negate: bool) -> Point:
        return -self if negate else self

    def _jacobian(self) -> _Jacobian:
        if self.x is None:
            return _INFINITY
        return (self.x, self.y, 1)

    def __add__(self, other: Any) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return _to_affine(_jac_add(self._jacobian(), other._jacobian()))

    def __sub__(self, other: Any) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return self + (-other)

    def __neg__(self) -> Point:
        if self.x is None:
            return self
        return Point(self.x, (P - self.y) % P)

    def __rmul__(self, k: Any) -> Point:
        if not isinstance(k, int):
            return NotImplemented
        k %= N
        acc = _INFINITY
        base = self._jacobian()
        for bit in bin(k)[2:]:
            acc = _jac_double(acc)
            if bit == "1":
                acc = _jac_add(acc, base)
        return _to_affine(acc)

    __mul__ = __rmul__

    def __repr__(self) -> str:
        if self.x is None:
            return "Point(zero)"
        return f"Point({self.to_bytes().hex()})"


G = Point(_GX, _GY)


def scalar_from_bytes(data: bytes) -> int:
    """Decode 32 big-endian bytes into a scalar, rejecting values not below the order."""
    data = bytes(data)
    if len(data) != 32:
        raise ValueError("expected 32 bytes")
    value = int.from_bytes(data, "big")
    if value >= N:
        raise ValueError("scalar is not less than the curve order")
    return value


def scalar_to_bytes(k: int) -> bytes:
    """Encode a scalar as 32 big-endian bytes."""
    return (k % N).to_bytes(32, "big")


def scalar_from_hash(digest: Any) -> int:
    """Reduce a 32-byte digest (or a hash object's digest) modulo the curve order."""
    if hasattr(digest, "digest"):
        digest = digest.digest()
    digest = bytes(digest)
    if len(digest) != 32:
        raise ValueError("expected a 32-byte digest")
    return int.from_bytes(digest, "big") % N


def random_scalar() -> int:
    """A uniformly random non-zero scalar."""
    return secrets.randbelow(N - 1) + 1


def tagged_hasher(tag: str | bytes) -> Any:
    """A SHA-256 object primed with the tagged-hash prefix for ``tag``."""
    if isinstance(tag, str):
        tag = tag.encode()
    tag_hash = hashlib.sha256(tag).digest()
    hasher = hashlib.sha256()
    hasher.update(tag_hash + tag_hash)
    return hasher