"""FROST threshold signing.

A t-of-n group jointly generates a key. Any t of the parties can then produce
signature shares that combine into a single BIP-340 signature under that key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .binonce import Nonce, NonceKeyPair
from .curve import G, N, Point, scalar_from_hash, tagged_hasher
from .frost_keys import (
    FinishKeyGenError,
    FrostKey,
    KeyGen,
    NewKeyGenError,
    PointPoly,
    ScalarPoly,
    XOnlyFrostKey,
    lagrange_lambda,
)
from .message import Message
from .schnorr import NonceGen, Schnorr, derive_nonce
from .signature import Signature


@dataclass(frozen=True)
class SignSession:
    """The shared state of one FROST signing session."""

    binding_coeff: int
    nonces_need_negation: bool
    agg_nonce: Point
    challenge: int
    nonces: dict[int, Nonce]


def _signer_lambda(index: int, session: SignSession, negate: bool) -> int:
    lam = lagrange_lambda(index + 1, (j + 1 for j in session.nonces if j != index))
    return (N - lam) % N if negate else lam


class Frost:
    """The FROST scheme built on a Schnorr instance."""

    def __init__(self, schnorr: Schnorr) -> None:
        self.schnorr = schnorr
        self._binding_hash = tagged_hasher("frost/binding")
        self._keygen_id_hash = tagged_hasher("frost/keygenid")

    def _nonce_gen(self) -> NonceGen:
        nonce_gen = self.schnorr.nonce_gen()
        if nonce_gen is None:
            raise ValueError("this instance has no nonce generator")
        return nonce_gen

    def new_scalar_poly(self, secret: int, threshold: int, session_id: bytes) -> ScalarPoly:
        """A polynomial of ``threshold`` terms starting with ``secret``.

        The remaining coefficients come from the nonce generator, so with a
        deterministic generator the result depends only on the inputs.
        """
        nonce_gen = self._nonce_gen()
        rest = (
            derive_nonce(nonce_gen, secret, bytes(session_id)) for _ in range(1, threshold)
        )
        return ScalarPoly((secret, *rest))

    def create_shares(
        self, keygen: KeyGen, scalar_poly: ScalarPoly
    ) -> tuple[list[int], Signature]:
        """Secret shares for every party and a proof of possession of our secret.

        The share at position 0 is for the party with index 0 (evaluated at 1).
        """
        keypair = self.schnorr.new_keypair(scalar_poly.first_coef())
        pop = self.schnorr.sign(keypair, Message.raw(keygen.keygen_id))
        shares = [scalar_poly.eval(i) for i in range(1, keygen.n_parties() + 1)]
        return shares, pop

    def _verify_pop(self, keygen: KeyGen, point_poly: PointPoly, pop: Signature) -> bool:
        even_point, _ = point_poly.points[0].with_even_y()
        return self.schnorr.verify(even_point, Message.raw(keygen.keygen_id), pop)

    def new_keygen(self, point_polys: Iterable[PointPoly]) -> KeyGen:
        """Start a key generation from every party's public polynomial."""
        point_polys = tuple(point_polys)
        if not point_polys:
            raise ValueError("key generation needs at least one polynomial")
        len_first = len(point_polys[0])
        if len_first == 0:
            raise ValueError("polynomials must have at least one term")
        for i, poly in enumerate(point_polys):
            if len(poly) != len_first:
                raise NewKeyGenError("poly_different_length", i)
        if len(point_polys) < len_first:
            raise NewKeyGenError("not_enough_parties")

        joint = PointPoly.combine(point_polys)
        public_key = joint.points[0]
        if public_key.is_zero():
            raise NewKeyGenError("zero_frost_key")

        hasher = self._keygen_id_hash.copy()
        hasher.update(len_first.to_bytes(4, "big"))
        hasher.update(len(point_polys).to_bytes(4, "big"))
        for poly in point_polys:
            for point in poly.points:
                hasher.update(point.to_bytes())
        keygen_id = hasher.digest()

        verification_shares = tuple(joint.eval(i) for i in range(1, len(point_polys) + 1))
        if any(share.is_zero() for share in verification_shares):
            raise NewKeyGenError("zero_verification_share")

        return KeyGen(
            point_polys,
            keygen_id,
            FrostKey(public_key, verification_shares, len(joint), 0),
        )

    def finish_keygen(
        self,
        keygen: KeyGen,
        my_index: int,
        secret_shares: Sequence[int],
        proofs_of_possession: Sequence[Signature],
    ) -> tuple[int, FrostKey]:
        """Check the received shares and proofs and sum our long-lived secret share."""
        if len(secret_shares) != keygen.frost_key.n_signers():
            raise ValueError("one secret share is needed from every party")
        if len(secret_shares) != len(proofs_of_possession):
            raise ValueError("one proof of possession is needed from every party")

        for i, (poly, pop) in enumerate(zip(keygen.point_polys, proofs_of_possession)):
            if not self._verify_pop(keygen, poly, pop):
                raise FinishKeyGenError("invalid_proof_of_possession", i)

        total = 0
        for i, (share, poly) in enumerate(zip(secret_shares, keygen.point_polys)):
            if share % N * G != poly.eval(my_index + 1):
                raise FinishKeyGenError("invalid_share", i)
            total = (total + share) % N

        if total == 0:
            raise ValueError("the total secret share is zero")
        return total, keygen.frost_key

    def finish_keygen_to_xonly(
        self,
        keygen: KeyGen,
        my_index: int,
        secret_shares: Sequence[int],
        proofs_of_possession: Sequence[Signature],
    ) -> tuple[int, XOnlyFrostKey]:
        """As :meth:`finish_keygen`, returning the key in its x-only form."""
        secret_share, frost_key = self.finish_keygen(
            keygen, my_index, secret_shares, proofs_of_possession
        )
        return secret_share, frost_key.into_xonly_key()

    def start_sign_session(
        self,
        frost_key: XOnlyFrostKey,
        nonces: Iterable[tuple[int, Nonce]],
        message: Message,
    ) -> SignSession:
        """Start signing ``message`` with the public nonces of the signing parties."""
        nonce_map = dict(sorted(dict(nonces).items()))

        agg = [Point(), Point()]
        for nonce in nonce_map.values():
            agg = [agg[0] + nonce.points[0], agg[1] + nonce.points[1]]
        # As in MuSig, an aggregate nonce at infinity is replaced by the generator.
        agg = [G if point.is_zero() else point for point in agg]

        hasher = self._binding_hash.copy()
        hasher.update(agg[0].to_bytes())
        hasher.update(agg[1].to_bytes())
        hasher.update(frost_key.public_key.to_xonly())
        message.hash_into(hasher)
        binding_coeff = scalar_from_hash(hasher)

        agg_nonce = agg[0] + binding_coeff * agg[1]
        if agg_nonce.is_zero():
            raise ValueError("computationally unreachable: aggregate nonce is zero")
        agg_nonce, needs_negation = agg_nonce.with_even_y()

        nonce_map = {
            i: nonce.conditional_negate(needs_negation) for i, nonce in nonce_map.items()
        }
        challenge = self.schnorr.challenge(agg_nonce, frost_key.public_key, message)
        return SignSession(binding_coeff, needs_negation, agg_nonce, challenge, nonce_map)

    def sign(
        self,
        frost_key: XOnlyFrostKey,
        session: SignSession,
        my_index: int,
        secret_share: int,
        secret_nonce: NonceKeyPair,
    ) -> int:
        """Our signature share under the FROST key."""
        lam = _signer_lambda(my_index, session, frost_key.needs_negation)
        r1, r2 = (
            (N - r) % N if session.nonces_need_negation else r for r in secret_nonce.secret
        )
        b = session.binding_coeff
        c = session.challenge
        return (r1 + r2 * b + lam * secret_share * c) % N

    def verify_signature_share(
        self,
        frost_key: XOnlyFrostKey,
        session: SignSession,
        index: int,
        signature_share: int,
    ) -> bool:
        """Check the share of the party at ``index`` against its verification share."""
        if index not in session.nonces:
            raise ValueError("verifying an index that is not part of the signing coalition")
        if not 0 <= index < frost_key.n_signers():
            raise ValueError("no verification share at that index")
        lam = _signer_lambda(index, session, frost_key.needs_negation)
        b = session.binding_coeff
        c = session.challenge
        X = frost_key.verification_shares[index]
        R1, R2 = session.nonces[index].points
        return (R1 + b * R2 + (c * lam % N) * X - signature_share * G).is_zero()

    def combine_signature_shares(
        self,
        frost_key: XOnlyFrostKey,
        session: SignSession,
        partial_sigs: Iterable[int],
    ) -> Signature:
        """Sum the shares, with the key's tweak, into a signature under the FROST key."""
        ck = session.challenge * frost_key.tweak_total
        total = (sum(partial_sigs) + ck) % N
        return Signature(session.agg_nonce, total)

    def gen_nonce(
        self,
        secret: int,
        session_id: bytes,
        public_key: Point | None = None,
        message: Message | None = None,
    ) -> NonceKeyPair:
        """Generate a signing nonce pair with this instance's nonce generator."""
        return NonceKeyPair.generate(
            self._nonce_gen(), secret, session_id, public_key, message
        )