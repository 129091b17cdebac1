"""Adaptor signatures: Schnorr signatures encrypted under a public key.

Anyone holding the encrypted signature can recover the decryption key once
the decrypted signature is published.
"""

from __future__ import annotations

from dataclasses import dataclass

from .curve import G, N, Point
from .message import Message
from .schnorr import KeyPair, Schnorr, derive_nonce
from .signature import Signature


@dataclass(frozen=True)
class EncryptedSignature:
    """A one-time encrypted Schnorr signature, also called a pre-signature."""

    R: Point
    s_hat: int
    needs_negation: bool

    def __post_init__(self) -> None:
        if self.R.is_zero() or not self.R.has_even_y():
            raise ValueError("nonce must be a non-zero point with even y")
        if not 0 <= self.s_hat < N:
            raise ValueError("encrypted scalar out of range")


def _require_nonzero(point: Point, name: str) -> None:
    if point.is_zero():
        raise ValueError(f"{name} must be a non-zero point")


class Adaptor(Schnorr):
    """A Schnorr scheme that can also create and handle encrypted signatures."""

    def encrypted_sign(
        self, signing_keypair: KeyPair, encryption_key: Point, message: Message
    ) -> EncryptedSignature:
        """Sign ``message`` with the signature encrypted under ``encryption_key``."""
        nonce_gen = self.nonce_gen()
        if nonce_gen is None:
            raise ValueError("this instance can only verify signatures")
        _require_nonzero(encryption_key, "encryption key")
        x, X = signing_keypair.secret_key, signing_keypair.public_key
        Y = encryption_key
        r = derive_nonce(nonce_gen, x, X.to_xonly(), Y.to_bytes(), message)
        R = r * G + Y
        if R.is_zero():
            raise ValueError("computationally unreachable: nonce point is zero")
        R, needs_negation = R.with_even_y()
        # r is corrected here; the decryptor corrects the decryption key later.
        if needs_negation:
            r = N - r
        c = self.challenge(R, X, message)
        return EncryptedSignature(R, (r + c * x) % N, needs_negation)

    def encryption_key_for(self, decryption_key: int) -> Point:
        """The public encryption key for a secret decryption key."""
        if not 0 < decryption_key < N:
            raise ValueError("decryption key must be a non-zero scalar")
        return decryption_key * G

    def verify_encrypted_signature(
        self,
        verification_key: Point,
        encryption_key: Point,
        message: Message,
        encrypted_signature: EncryptedSignature,
    ) -> bool:
        """Whether decrypting would yield a valid signature on ``message``."""
        if verification_key.is_zero() or not verification_key.has_even_y():
            raise ValueError("verification key must be a non-zero point with even y")
        _require_nonzero(encryption_key, "encryption key")
        R = encrypted_signature.R
        R_hat = R + encryption_key.conditional_negate(not encrypted_signature.needs_negation)
        c = self.challenge(R, verification_key, message)
        return R_hat == encrypted_signature.s_hat * G - c * verification_key

    def decrypt_signature(
        self, decryption_key: int, encrypted_signature: EncryptedSignature
    ) -> Signature:
        """Decrypt into an ordinary signature; publishing it reveals the key."""
        y = decryption_key % N
        if encrypted_signature.needs_negation:
            y = (N - y) % N
        return Signature(encrypted_signature.R, (encrypted_signature.s_hat + y) % N)

    def recover_decryption_key(
        self,
        encryption_key: Point,
        encrypted_signature: EncryptedSignature,
        signature: Signature,
    ) -> int | None:
        """The decryption key, or None if ``signature`` is not this decryption."""
        if signature.R != encrypted_signature.R:
            return None
        y = (signature.s - encrypted_signature.s_hat) % N
        if encrypted_signature.needs_negation:
            y = (N - y) % N
        if y != 0 and y * G == encryption_key:
            return y
        return None