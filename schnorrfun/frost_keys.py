"""Polynomials, joint keys and key-generation state for FROST threshold signing."""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Iterable

from .curve import G, N, Point, random_scalar


def _require_index(x: int) -> int:
    x %= N
    if x == 0:
        raise ValueError("polynomial index must be non-zero")
    return x


@dataclass(frozen=True)
class ScalarPoly:
    """A participant's secret polynomial; the first coefficient is the secret."""

    coefficients: tuple[int, ...]

    def __post_init__(self) -> None:
        coefficients = tuple(self.coefficients)
        if any(not 0 < c < N for c in coefficients):
            raise ValueError("coefficients must be non-zero scalars")
        object.__setattr__(self, "coefficients", coefficients)

    def _require_terms(self) -> None:
        if not self.coefficients:
            raise ValueError("the polynomial has no coefficients")

    def eval(self, x: int) -> int:
        """The polynomial evaluated at the non-zero position ``x``."""
        self._require_terms()
        x = _require_index(x)
        return sum(c * pow(x, i, N) for i, c in enumerate(self.coefficients)) % N

    def to_point_poly(self) -> PointPoly:
        """The public commitment: every coefficient multiplied by G."""
        return PointPoly(tuple(c * G for c in self.coefficients))

    @classmethod
    def random(cls, n_coefficients: int) -> ScalarPoly:
        return cls(tuple(random_scalar() for _ in range(n_coefficients)))

    @classmethod
    def random_using_secret(cls, n_coefficients: int, secret: int) -> ScalarPoly:
        """A polynomial with ``secret`` first and random remaining coefficients."""
        rest = (random_scalar() for _ in range(1, n_coefficients))
        return cls((secret, *rest))

    def first_coef(self) -> int:
        self._require_terms()
        return self.coefficients[0]

    def __len__(self) -> int:
        return len(self.coefficients)


@dataclass(frozen=True)
class PointPoly:
    """A participant's public commitment polynomial."""

    points: tuple[Point, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))

    def eval(self, x: int) -> Point:
        """The point polynomial evaluated at the non-zero position ``x``."""
        x = _require_index(x)
        return reduce(
            lambda acc, term: acc + term[1] * pow(x, term[0], N),
            enumerate(self.points),
            Point(),
        )

    @classmethod
    def combine(cls, polys: Iterable[PointPoly]) -> PointPoly:
        """Add polynomials coefficient by coefficient into a joint polynomial."""
        iterator = iter(polys)
        try:
            combined = list(next(iterator).points)
        except StopIteration:
            raise ValueError("cannot combine an empty list of polynomials") from None
        for poly in iterator:
            combined = [a + b for a, b in zip(combined, poly.points)] + combined[
                len(poly.points):
            ]
        return cls(tuple(combined))

    def __len__(self) -> int:
        return len(self.points)


_NEW_KEYGEN_MESSAGES = {
    "poly_different_length": "polynomial commitment from party at index {} was a different length",
    "not_enough_parties": "the number of parties was less than the threshold",
    "zero_frost_key": (
        "The frost public key was zero. Computationally unreachable, "
        "one party is acting maliciously."
    ),
    "zero_verification_share": (
        "Zero verification share. Computationally unreachable, "
        "one party is acting maliciously."
    ),
}

_FINISH_KEYGEN_MESSAGES = {
    "invalid_share": (
        "the secret share at index {} does not match the expected evaluation "
        "of their point polynomial at our index. Check that the order and our index is correct"
    ),
    "invalid_proof_of_possession": (
        "the proof of possession provided by party at index {} was invalid, check ordering."
    ),
}


class NewKeyGenError(ValueError):
    """The point polynomials could not start a key generation."""

    def __init__(self, kind: str, index: int | None = None) -> None:
        if kind not in _NEW_KEYGEN_MESSAGES:
            raise ValueError(f"unknown key generation error kind {kind!r}")
        self.kind = kind
        self.index = index
        super().__init__(_NEW_KEYGEN_MESSAGES[kind].format(index))


class FinishKeyGenError(ValueError):
    """A received share or proof of possession did not check out."""

    def __init__(self, kind: str, index: int) -> None:
        if kind not in _FINISH_KEYGEN_MESSAGES:
            raise ValueError(f"unknown key generation error kind {kind!r}")
        self.kind = kind
        self.index = index
        super().__init__(_FINISH_KEYGEN_MESSAGES[kind].format(index))


def _tweaked(public_key: Point, tweak: int) -> Point:
    new_key = public_key + (tweak % N) * G
    if new_key.is_zero():
        raise ValueError("tweak is the negation of the secret key")
    return new_key


@dataclass(frozen=True)
class FrostKey:
    """A joint FROST public key with every party's verification share."""

    public_key: Point
    verification_shares: tuple[Point, ...]
    threshold: int
    tweak_total: int = 0

    def __post_init__(self) -> None:
        if self.public_key.is_zero():
            raise ValueError("frost public key must be non-zero")
        object.__setattr__(self, "verification_shares", tuple(self.verification_shares))

    def tweak(self, tweak: int) -> FrostKey:
        """A key equal to this one plus ``tweak * G`` that the same parties can sign for."""
        return FrostKey(
            _tweaked(self.public_key, tweak),
            self.verification_shares,
            self.threshold,
            (self.tweak_total + tweak) % N,
        )

    def into_xonly_key(self) -> XOnlyFrostKey:
        """The BIP-340 compatible, even-y form of the key."""
        public_key, needs_negation = self.public_key.with_even_y()
        tweak = (-self.tweak_total if needs_negation else self.tweak_total) % N
        return XOnlyFrostKey(
            public_key, self.verification_shares, self.threshold, tweak, needs_negation
        )

    def n_signers(self) -> int:
        return len(self.verification_shares)


@dataclass(frozen=True)
class XOnlyFrostKey:
    """A FROST key whose public key has even y; tweaks to it are x-only tweaks."""

    public_key: Point
    verification_shares: tuple[Point, ...]
    threshold: int
    tweak_total: int
    needs_negation: bool

    def __post_init__(self) -> None:
        if self.public_key.is_zero() or not self.public_key.has_even_y():
            raise ValueError("public key must be a non-zero point with even y")
        object.__setattr__(self, "verification_shares", tuple(self.verification_shares))

    def tweak(self, tweak: int) -> XOnlyFrostKey:
        """Add ``tweak * G`` and take the even-y form of the result."""
        new_key, negated = _tweaked(self.public_key, tweak).with_even_y()
        new_tweak = (self.tweak_total + tweak) % N
        if negated:
            new_tweak = (-new_tweak) % N
        return XOnlyFrostKey(
            new_key,
            self.verification_shares,
            self.threshold,
            new_tweak,
            self.needs_negation ^ negated,
        )

    def n_signers(self) -> int:
        return len(self.verification_shares)


@dataclass(frozen=True)
class KeyGen:
    """A distributed key generation session."""

    point_polys: tuple[PointPoly, ...]
    keygen_id: bytes
    frost_key: FrostKey

    def __post_init__(self) -> None:
        object.__setattr__(self, "point_polys", tuple(self.point_polys))

    def n_parties(self) -> int:
        return len(self.point_polys)


def lagrange_lambda(x_j: int, x_ms: Iterable[int]) -> int:
    """The Lagrange coefficient at zero for index ``x_j`` among the indexes ``x_ms``."""
    x_j = _require_index(x_j)
    acc = 1
    for x_m in x_ms:
        x_m = _require_index(x_m)
        denominator = (x_m - x_j) % N
        if denominator == 0:
            raise ValueError("duplicate index in signer set")
        acc = acc * x_m * pow(denominator, -1, N) % N
    return acc