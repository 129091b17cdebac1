# schnorrfun

Schnorr signatures over secp256k1, written in pure Python. The package has
no dependencies outside the standard library.

It provides:

- `schnorrfun.curve`: curve points (`Point`, the generator `G`, the order
  `N`), scalar encoding (`scalar_from_bytes`, `scalar_to_bytes`,
  `scalar_from_hash`, `random_scalar`) and BIP-340 tagged hashes
  (`tagged_hasher`).
- `schnorrfun.message`: messages, with or without an application tag
  (`Message.raw`, `Message.plain`).
- `schnorrfun.signature`: 64-byte signatures (`Signature`).
- `schnorrfun.schnorr`: BIP-340 style signing and verification (`Schnorr`).
  Nonces are generated deterministically (`Deterministic`) or with
  auxiliary randomness (`Synthetic`).
- `schnorrfun.adaptor`: adaptor signatures, also called one-time encrypted
  signatures (`Adaptor`, `EncryptedSignature`).
- `schnorrfun.binonce`: nonce pairs for multi-party signing (`Nonce`,
  `NonceKeyPair`).
- `schnorrfun.frost_keys`: polynomials, joint keys and key generation state
  for FROST (`ScalarPoly`, `PointPoly`, `FrostKey`, `XOnlyFrostKey`,
  `KeyGen`, `lagrange_lambda`). It also holds the errors `NewKeyGenError`
  and `FinishKeyGenError`, both subclasses of `ValueError`.
- `schnorrfun.frost`: FROST threshold key generation and signing (`Frost`,
  `SignSession`).

Scalars are plain Python integers modulo `N`. Invalid input, such as
malformed bytes, a zero key or an out-of-range scalar, raises `ValueError`.

This package is meant for experiments and learning. Its arithmetic is not
constant-time, so do not use it to protect real funds or secrets.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## Signing and verifying

```python
from schnorrfun.curve import random_scalar
from schnorrfun.message import Message
from schnorrfun.schnorr import Deterministic, Schnorr

schnorr = Schnorr(Deterministic())
keypair = schnorr.new_keypair(random_scalar())
message = Message.plain("my-app", b"attack at dawn")

signature = schnorr.sign(keypair, message)
assert schnorr.verify(keypair.public_key, message, signature)

print(signature)  # 64 bytes, shown as hex
```

`Signature.to_bytes()` gives the 64-byte encoding. `Signature.from_bytes()`
and `Signature.from_hex()` read it back.

`Schnorr.verify_only()` gives an instance that has no nonce generator. It
can verify signatures but cannot sign.

## Adaptor signatures

`Adaptor` is a `Schnorr` that can also create encrypted signatures.

```python
from schnorrfun.adaptor import Adaptor
from schnorrfun.curve import random_scalar
from schnorrfun.message import Message
from schnorrfun.schnorr import Deterministic

schnorr = Adaptor(Deterministic())
signing_keypair = schnorr.new_keypair(random_scalar())
decryption_key = random_scalar()
encryption_key = schnorr.encryption_key_for(decryption_key)
message = Message.plain("my-app", b"send 1 coin to Bob")

encrypted = schnorr.encrypted_sign(signing_keypair, encryption_key, message)
assert schnorr.verify_encrypted_signature(
    signing_keypair.public_key, encryption_key, message, encrypted
)

signature = schnorr.decrypt_signature(decryption_key, encrypted)
recovered = schnorr.recover_decryption_key(encryption_key, encrypted, signature)
assert recovered == decryption_key
```

`recover_decryption_key` returns `None` if the signature was not decrypted
from the given encrypted signature.

## FROST threshold signatures

Parties are identified by zero-based indexes. The party at index `i`
receives the polynomial evaluations at `i + 1`. The example below runs all
three parties of a 2-of-3 group in one process.

```python
from schnorrfun.curve import random_scalar
from schnorrfun.frost import Frost
from schnorrfun.message import Message
from schnorrfun.schnorr import Deterministic, Schnorr

frost = Frost(Schnorr(Deterministic()))

# Key generation
polys = [frost.new_scalar_poly(random_scalar(), 2, b"keygen-session") for _ in range(3)]
keygen = frost.new_keygen([poly.to_point_poly() for poly in polys])
created = [frost.create_shares(keygen, poly) for poly in polys]
proofs = [pop for _, pop in created]
results = [
    frost.finish_keygen_to_xonly(keygen, i, [shares[i] for shares, _ in created], proofs)
    for i in range(3)
]
secret_shares = [share for share, _ in results]
frost_key = results[0][1]

# Signing with parties 0 and 2
message = Message.plain("my-app", b"hello")
signers = [0, 2]
nonces = {
    i: frost.gen_nonce(secret_shares[i], b"sign-session-" + bytes([i]), frost_key.public_key, message)
    for i in signers
}
session = frost.start_sign_session(frost_key, [(i, nonces[i].public) for i in signers], message)
sig_shares = [frost.sign(frost_key, session, i, secret_shares[i], nonces[i]) for i in signers]
assert all(
    frost.verify_signature_share(frost_key, session, i, share)
    for i, share in zip(signers, sig_shares)
)

signature = frost.combine_signature_shares(frost_key, session, sig_shares)
assert frost.schnorr.verify(frost_key.public_key, message, signature)
```

`Frost.new_keygen` raises `NewKeyGenError` in three cases: the polynomials
differ in length, there are fewer parties than the threshold, or the joint
key or a verification share is zero. `Frost.finish_keygen` and
`Frost.finish_keygen_to_xonly` raise `FinishKeyGenError` when a received
share or a proof of possession is invalid.

With a deterministic nonce generator, a nonce depends only on its inputs.
Each signing session must therefore use a unique session id.

Keys can be tweaked:

- `FrostKey.tweak` applies a plain tweak, as used in BIP-32 derivation. It
  is applied before the key is turned into x-only form with
  `FrostKey.into_xonly_key`.
- `XOnlyFrostKey.tweak` applies an x-only tweak, as used in taproot
  commitments.

`Frost.combine_signature_shares` includes the accumulated tweak in the
combined signature.

## What this package does not do

This package is a library only. It has no command-line tool. It does not
carry messages between participants: the shares, proofs of possession and
nonces must be passed between parties by the application. It stores no keys
or nonces. It provides no MuSig key aggregation or MuSig signing.

## Running the tests

```
pytest
```