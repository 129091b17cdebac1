"""BIP-340 Schnorr signing and verification with pluggable nonce generation."""

from __future__ import annotations

import hashlib
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from .curve import G, N, Point, scalar_from_hash, scalar_to_bytes, tagged_hasher
from .message import Message
from .signature import Signature


class NonceGen(ABC):
    """Hashes a secret (and possibly randomness) to begin deriving a secret nonce."""

    @abstractmethod
    def begin_derivation(self, secret: int) -> Any:
        """Return a hash object that has absorbed the secret."""

    @abstractmethod
    def add_tag(self, tag: str) -> NonceGen:
        """Return a copy whose hashes are tagged for ``tag``."""


class Deterministic(NonceGen):
    """Derives nonces from the secret and public inputs alone."""

    def __init__(self) -> None:
        self._nonce_hash = hashlib.sha256()

    def begin_derivation(self, secret: int) -> Any:
        hasher = self._nonce_hash.copy()
        hasher.update(scalar_to_bytes(secret))
        return hasher

    def add_tag(self, tag: str) -> Deterministic:
        tagged = Deterministic()
        tagged._nonce_hash = tagged_hasher(tag.encode() + b"/nonce")
        return tagged


class Synthetic(NonceGen):
    """Masks the secret with hashed auxiliary randomness before deriving nonces."""

    def __init__(self, aux_rng: Callable[[], bytes] | None = None) -> None:
        self._aux_rng = aux_rng if aux_rng is not None else lambda: secrets.token_bytes(32)
        self._nonce_hash = hashlib.sha256()
        self._aux_hash = hashlib.sha256()

    def begin_derivation(self, secret: int) -> Any:
        aux = bytes(self._aux_rng())
        if len(aux) != 32:
            raise ValueError("auxiliary randomness must be 32 bytes")
        aux_hasher = self._aux_hash.copy()
        aux_hasher.update(aux)
        masked = bytes(a ^ b for a, b in zip(aux_hasher.digest(), scalar_to_bytes(secret)))
        hasher = self._nonce_hash.copy()
        hasher.update(masked)
        return hasher

    def add_tag(self, tag: str) -> Synthetic:
        tagged = Synthetic(self._aux_rng)
        tagged._nonce_hash = tagged_hasher(tag.encode() + b"/nonce")
        tagged._aux_hash = tagged_hasher(tag.encode() + b"/aux")
        return tagged


def _absorb(hasher: Any, item: Any) -> None:
    if isinstance(item, (bytes, bytearray, memoryview)):
        hasher.update(item)
    elif hasattr(item, "hash_into"):
        item.hash_into(hasher)
    else:
        raise TypeError(f"cannot hash a {type(item).__name__}")


def derive_nonce(nonce_gen: NonceGen, secret: int, *args: Any) -> int:
    """Derive a non-zero secret nonce from the secret and the public inputs ``args``."""
    hasher = nonce_gen.begin_derivation(secret)
    for item in args:
        _absorb(hasher, item)
    nonce = scalar_from_hash(hasher)
    if nonce == 0:
        raise ValueError("derived a zero nonce")
    return nonce


@dataclass(frozen=True)
class KeyPair:
    """A secret key and its even-y public key."""

    secret_key: int
    public_key: Point

    @classmethod
    def new(cls, secret: int) -> KeyPair:
        """Build a key pair, negating the secret if its public key has odd y."""
        if not 0 < secret < N:
            raise ValueError("secret key must be a non-zero scalar")
        public_key, negated = (secret * G).with_even_y()
        return cls(N - secret if negated else secret, public_key)


class Schnorr:
    """A BIP-340 Schnorr scheme; without a nonce generator it can only verify."""

    def __init__(self, nonce_gen: NonceGen | None = None) -> None:
        self._nonce_gen = nonce_gen.add_tag("BIP0340") if nonce_gen is not None else None
        self._challenge_hash = tagged_hasher("BIP0340/challenge")

    @classmethod
    def verify_only(cls) -> Schnorr:
        return cls()

    def nonce_gen(self) -> NonceGen | None:
        return self._nonce_gen

    def challenge_hash(self) -> Any:
        return self._challenge_hash.copy()

    def new_keypair(self, secret: int) -> KeyPair:
        return KeyPair.new(secret)

    def sign(self, keypair: KeyPair, message: Message) -> Signature:
        if self._nonce_gen is None:
            raise ValueError("this instance can only verify signatures")
        x, X = keypair.secret_key, keypair.public_key
        r = derive_nonce(self._nonce_gen, x, X.to_xonly(), message)
        R, negated = (r * G).with_even_y()
        if negated:
            r = N - r
        c = self.challenge(R, X, message)
        return Signature(R, (r + c * x) % N)

    def challenge(self, R: Point, X: Point, message: Message) -> int:
        """The Fiat-Shamir challenge H(R || X || m) over x-only encodings."""
        hasher = self.challenge_hash()
        hasher.update(R.to_xonly())
        hasher.update(X.to_xonly())
        message.hash_into(hasher)
        return scalar_from_hash(hasher)

    def verify(self, public_key: Point, message: Message, signature: Signature) -> bool:
        if public_key.is_zero() or not public_key.has_even_y():
            raise ValueError("public key must be a non-zero point with even y")
        c = self.challenge(signature.R, public_key, message)
        implied = signature.s * G - c * public_key
        return implied == signature.R

    def anticipate_signature(self, X: Point, R: Point, message: Message) -> Point:
        """The point ``R + c * X`` that the signature scalar times G will equal."""
        c = self.challenge(R, X, message)
        return R + c * X