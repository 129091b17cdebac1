import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from schnorrfun.binonce import NonceKeyPair
from schnorrfun.curve import G, N, scalar_from_bytes
from schnorrfun.frost import Frost, SignSession
from schnorrfun.frost_keys import (
    FinishKeyGenError,
    NewKeyGenError,
    ScalarPoly,
)
from schnorrfun.message import Message
from schnorrfun.schnorr import Deterministic, Schnorr

PLAIN_TWEAK = scalar_from_bytes(
    bytes(
        [
            0xE8, 0xF7, 0x91, 0xFF, 0x92, 0x25, 0xA2, 0xAF, 0x01, 0x02, 0xAF, 0xFF, 0x4A, 0x9A,
            0x72, 0x3D, 0x96, 0x12, 0xA6, 0x82, 0xA2, 0x5E, 0xBE, 0x79, 0x80, 0x2B, 0x26, 0x3C,
            0xDF, 0xCD, 0x83, 0xBB,
        ]
    )
)
XONLY_TWEAK = scalar_from_bytes(
    bytes(
        [
            0xE8, 0xF7, 0x92, 0xFF, 0x92, 0x25, 0xA2, 0xAF, 0x01, 0x02, 0xAF, 0xFF, 0x4A, 0x9A,
            0x72, 0x3D, 0x96, 0x12, 0xA6, 0x82, 0xA2, 0x5E, 0xBE, 0x79, 0x80, 0x2B, 0x26, 0x3C,
            0xDF, 0xCD, 0x83, 0xBB,
        ]
    )
)


def _frost():
    return Frost(Schnorr(Deterministic()))


def _keygen_all(frost, scalar_polys):
    keygen = frost.new_keygen([sp.to_point_poly() for sp in scalar_polys])
    created = [frost.create_shares(keygen, sp) for sp in scalar_polys]
    shares = [s for s, _ in created]
    pops = [p for _, p in created]
    return keygen, shares, pops


def _three_party():
    return [ScalarPoly((3, 7)), ScalarPoly((11, 13)), ScalarPoly((17, 19))]


def test_end_to_end():
    frost = _frost()
    keygen, shares, pops = _keygen_all(frost, _three_party())
    results = [
        frost.finish_keygen(keygen, i, [s[i] for s in shares], pops) for i in range(3)
    ]
    keys = [key for _, key in results]
    secret_shares = [share for share, _ in results]
    assert keys[0] == keys[1] == keys[2]

    keys = [key.tweak(PLAIN_TWEAK) for key in keys]
    xkeys = [key.into_xonly_key() for key in keys]
    assert xkeys[0] == xkeys[1] == xkeys[2]
    xkeys = [key.tweak(XONLY_TWEAK) for key in xkeys]

    shares_bytes = b"".join(p.to_bytes() for p in xkeys[0].verification_shares)
    sid1 = shares_bytes + b"frost-end-to-end-test-1" + b"0"
    sid2 = shares_bytes + b"frost-end-to-end-test-2" + b"2"
    message = Message.plain("test", b"test")
    nonce1 = frost.gen_nonce(secret_shares[0], sid1, xkeys[0].public_key, message)
    nonce3 = frost.gen_nonce(secret_shares[2], sid2, xkeys[0].public_key, message)
    nonces = [(0, nonce1.public), (2, nonce3.public)]

    session = frost.start_sign_session(xkeys[0], nonces, message)
    session2 = frost.start_sign_session(xkeys[1], list(nonces), message)
    assert session2 == session

    sig1 = frost.sign(xkeys[0], session, 0, secret_shares[0], nonce1)
    sig3 = frost.sign(xkeys[2], session, 2, secret_shares[2], nonce3)
    assert frost.verify_signature_share(xkeys[0], session, 0, sig1)
    assert frost.verify_signature_share(xkeys[0], session, 2, sig3)

    combined = frost.combine_signature_shares(xkeys[0], session, [sig1, sig3])
    assert frost.schnorr.verify(xkeys[0].public_key, Message.plain("test", b"test"), combined)


def _run_protocol(frost, n_parties, threshold, tweak1, tweak2, signer_indexes):
    scalar_polys = [
        ScalarPoly(tuple(i * j for j in range(1, threshold + 1)))
        for i in range(1, n_parties + 1)
    ]
    keygen, shares, pops = _keygen_all(frost, scalar_polys)
    secret_shares, keys = [], []
    for i in range(n_parties):
        share, key = frost.finish_keygen(keygen, i, [s[i] for s in shares], pops)
        if tweak1 is not None:
            key = key.tweak(tweak1)
        xkey = key.into_xonly_key()
        if tweak2 is not None:
            xkey = xkey.tweak(tweak2)
        secret_shares.append(share)
        keys.append(xkey)

    first = signer_indexes[0]
    sid = (
        keys[first].public_key.to_bytes()
        + b"".join(p.to_bytes() for p in keys[first].verification_shares)
        + b"frost-prop-test"
    )
    nonces = [
        frost.gen_nonce(secret_shares[i], sid + bytes([i]), keys[first].public_key)
        for i in signer_indexes
    ]
    received = [(i, nonce.public) for i, nonce in zip(signer_indexes, nonces)]
    message = Message.plain("test", b"test")
    signing_session = frost.start_sign_session(keys[first], received, message)

    sigs = []
    for i, nonce in zip(signer_indexes, nonces):
        session = frost.start_sign_session(keys[i], received, message)
        sig = frost.sign(keys[i], session, i, secret_shares[i], nonce)
        assert frost.verify_signature_share(keys[i], session, i, sig)
        sigs.append(sig)
    combined = frost.combine_signature_shares(keys[first], signing_session, sigs)
    return frost.schnorr.verify(keys[first].public_key, message, combined)


@settings(max_examples=3, deadline=None)
@given(
    data=st.data(),
    tweak1=st.one_of(st.none(), st.integers(0, N - 1)),
    tweak2=st.one_of(st.none(), st.integers(0, N - 1)),
)
def test_frost_property(data, tweak1, tweak2):
    n_parties = data.draw(st.integers(3, 4))
    threshold = data.draw(st.integers(3, n_parties))
    order = data.draw(st.permutations(list(range(n_parties))))
    signers = sorted(order[:threshold])
    assert _run_protocol(_frost(), n_parties, threshold, tweak1, tweak2, signers)


def test_new_scalar_poly_starts_with_secret():
    frost = _frost()
    poly = frost.new_scalar_poly(42, 3, b"frost-unique-id")
    assert len(poly) == 3
    assert poly.first_coef() == 42
    assert poly == frost.new_scalar_poly(42, 3, b"frost-unique-id")


def test_create_shares_evaluate_poly_and_prove_possession():
    frost = _frost()
    polys = _three_party()
    keygen, shares, pops = _keygen_all(frost, polys)
    assert shares[0] == [polys[0].eval(i) for i in (1, 2, 3)]
    even_key, _ = (3 * G).with_even_y()
    assert frost.schnorr.verify(even_key, Message.raw(keygen.keygen_id), pops[0])


def test_keygen_public_key_is_sum_of_secrets():
    frost = _frost()
    keygen = frost.new_keygen([sp.to_point_poly() for sp in _three_party()])
    assert keygen.frost_key.public_key == (3 + 11 + 17) * G
    assert keygen.frost_key.threshold == 2
    assert keygen.n_parties() == 3
    assert len(keygen.keygen_id) == 32


def test_keygen_rejects_different_lengths():
    frost = _frost()
    polys = [ScalarPoly((1, 2)), ScalarPoly((3, 4)), ScalarPoly((5, 6, 7))]
    with pytest.raises(NewKeyGenError) as info:
        frost.new_keygen([p.to_point_poly() for p in polys])
    assert info.value.kind == "poly_different_length"
    assert info.value.index == 2


def test_keygen_rejects_too_few_parties():
    frost = _frost()
    polys = [ScalarPoly((1, 2, 3)), ScalarPoly((4, 5, 6))]
    with pytest.raises(NewKeyGenError) as info:
        frost.new_keygen([p.to_point_poly() for p in polys])
    assert info.value.kind == "not_enough_parties"


def test_finish_keygen_rejects_bad_proof_of_possession():
    frost = _frost()
    keygen, shares, pops = _keygen_all(frost, _three_party())
    with pytest.raises(FinishKeyGenError) as info:
        frost.finish_keygen(keygen, 0, [s[0] for s in shares], pops[::-1])
    assert info.value.kind == "invalid_proof_of_possession"
    assert info.value.index == 0


def test_finish_keygen_rejects_bad_share():
    frost = _frost()
    keygen, shares, pops = _keygen_all(frost, _three_party())
    received = [s[0] for s in shares]
    received[1] = (received[1] + 1) % N
    with pytest.raises(FinishKeyGenError) as info:
        frost.finish_keygen(keygen, 0, received, pops)
    assert info.value.kind == "invalid_share"
    assert info.value.index == 1


def test_finish_keygen_rejects_wrong_count():
    frost = _frost()
    keygen, shares, pops = _keygen_all(frost, _three_party())
    with pytest.raises(ValueError):
        frost.finish_keygen(keygen, 0, [s[0] for s in shares][:2], pops)


def test_finish_keygen_to_xonly_has_even_key():
    frost = _frost()
    keygen, shares, pops = _keygen_all(frost, _three_party())
    share, key = frost.finish_keygen_to_xonly(keygen, 1, [s[1] for s in shares], pops)
    assert key.public_key.has_even_y()
    assert share * G == key.verification_shares[1]


def _session_setup():
    frost = _frost()
    keygen, shares, pops = _keygen_all(frost, _three_party())
    share0, key = frost.finish_keygen_to_xonly(keygen, 0, [s[0] for s in shares], pops)
    share1, _ = frost.finish_keygen_to_xonly(keygen, 1, [s[1] for s in shares], pops)
    nonce0 = frost.gen_nonce(share0, b"session-0")
    nonce1 = frost.gen_nonce(share1, b"session-1")
    message = Message.plain("test", b"hello")
    session = frost.start_sign_session(key, [(1, nonce1.public), (0, nonce0.public)], message)
    return frost, key, session, (share0, share1), (nonce0, nonce1)


def test_tampered_signature_share_fails():
    frost, key, session, shares, nonces = _session_setup()
    sig = frost.sign(key, session, 0, shares[0], nonces[0])
    assert frost.verify_signature_share(key, session, 0, sig)
    assert not frost.verify_signature_share(key, session, 0, (sig + 1) % N)


def test_session_nonces_sorted_and_challenge_consistent():
    frost, key, session, shares, nonces = _session_setup()
    assert isinstance(session, SignSession)
    assert list(session.nonces) == [0, 1]
    assert session.agg_nonce.has_even_y()
    assert session.challenge == frost.schnorr.challenge(
        session.agg_nonce, key.public_key, Message.plain("test", b"hello")
    )


def test_verify_share_outside_coalition_raises():
    frost, key, session, shares, nonces = _session_setup()
    with pytest.raises(ValueError):
        frost.verify_signature_share(key, session, 2, 5)


def test_gen_nonce_is_deterministic_per_session():
    frost = _frost()
    a = frost.gen_nonce(99, b"sid")
    assert a == frost.gen_nonce(99, b"sid")
    assert a.public != frost.gen_nonce(99, b"other-sid").public
    assert NonceKeyPair.from_bytes(a.to_bytes()) == a


def test_verify_only_cannot_generate():
    frost = Frost(Schnorr.verify_only())
    with pytest.raises(ValueError):
        frost.gen_nonce(5, b"sid")
    with pytest.raises(ValueError):
        frost.new_scalar_poly(5, 2, b"sid")