"""Signature utilities built on Ed25519 primitives."""
from __future__ import annotations

from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import VerifyKey


def verify_signature(pubkey: bytes, message: bytes, signature: bytes) -> bool:
    """Verify an Ed25519 signature.

    Args:
        pubkey: Raw 32-byte public key.
        message: Exact bytes that were signed on the client.
        signature: Raw 64-byte signature.

    Returns:
        True if the signature is valid for `message` under `pubkey`; False otherwise.
    """
    try:
        VerifyKey(pubkey).verify(message, signature)
        return True
    except (BadSignatureError, CryptoError, ValueError, TypeError):
        return False
