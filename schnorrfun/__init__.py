"""BIP-340 Schnorr, adaptor and FROST threshold signatures over secp256k1."""

__version__ = "0.1.0"