# src/textstore/services/crypto.py
"""Cryptographic services for Textstore."""

from __future__ import annotations

import base64
import secrets
import struct
import time

from blake3 import blake3
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from textstore.core.settings import settings

PUBKEY_LENGTH_BYTES = 32
PRIVATE_KEY_LENGTH_BYTES = 32
CHALLENGE_NONCE_BYTES = 16
CHALLENGE_MAC_BYTES = 32
_ISSUED_AT = struct.Struct("<q")
CHALLENGE_PAYLOAD_BYTES = CHALLENGE_NONCE_BYTES + _ISSUED_AT.size + CHALLENGE_MAC_BYTES


def encode_b64(data: bytes) -> str:
    """Encode bytes as unpadded URL-safe base64."""
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


class CryptoService:
    """Service handling cryptographic operations."""

    @staticmethod
    def decode_base64(data: str) -> bytes:
        """Decode a URL-safe base64 string, accepting omitted padding."""
        padding = "=" * (-len(data) % 4)
        try:
            return base64.urlsafe_b64decode(data + padding)
        except Exception as err:
            raise ValueError(f"Invalid base64 encoding: {err}") from err

    @staticmethod
    def _decode_hex(data: str) -> bytes:
        try:
            return bytes.fromhex(data)
        except ValueError as err:
            raise ValueError(f"Invalid hex encoding: {err}") from err

    @staticmethod
    def validate_and_decode_pubkey(pubkey_encoded: str) -> bytes:
        """Validate and decode an Ed25519 public key given as hex or base64."""
        cleaned = pubkey_encoded.strip()
        errors: list[str] = []
        for decoder in (
            CryptoService._decode_hex,
            CryptoService.decode_base64,
        ):
            try:
                result = decoder(cleaned)
            except ValueError as err:
                errors.append(str(err))
                continue
            if len(result) != PUBKEY_LENGTH_BYTES:
                errors.append("Ed25519 public keys must be 32 bytes")
                continue
            return result
        joined = "; ".join(errors) if errors else "unknown decoding error"
        raise ValueError(f"Invalid public key format: {joined}")

    @staticmethod
    def generate_key_pair() -> tuple[str, str]:
        """Generate a new Ed25519 key pair.

        Returns:
            Tuple of (private_key_hex, public_key_hex)
        """
        private_key = Ed25519PrivateKey.generate()
        private_hex = private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        ).hex()
        return private_hex, CryptoService.public_key_from_private(private_hex).hex()

    @staticmethod
    def public_key_from_private(private_key_hex: str) -> bytes:
        """Return the raw public key for a hex-encoded Ed25519 private key seed."""
        try:
            private_bytes = bytes.fromhex(private_key_hex.strip())
            private_key = Ed25519PrivateKey.from_private_bytes(private_bytes)
        except ValueError as err:
            raise ValueError(f"Invalid private key: {err}") from err
        return private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @staticmethod
    def _challenge_mac(pubkey_bytes: bytes, nonce_bytes: bytes, issued_at: bytes) -> bytes:
        secret = str(settings.secret_key).encode()
        payload = b"|".join((b"login", pubkey_bytes, nonce_bytes, issued_at, secret))
        return blake3(payload).digest()

    @staticmethod
    def issue_auth_challenge(pubkey_bytes: bytes, *, now: int | None = None) -> str:
        """Generate a MAC-protected login challenge for a public key.

        Returns:
            Base64 challenge the client must sign
        """
        nonce_bytes = secrets.token_bytes(CHALLENGE_NONCE_BYTES)
        issued_at = _ISSUED_AT.pack(int(time.time()) if now is None else now)
        mac = CryptoService._challenge_mac(pubkey_bytes, nonce_bytes, issued_at)
        return encode_b64(nonce_bytes + issued_at + mac)

    @staticmethod
    def validate_auth_challenge(
        pubkey_bytes: bytes,
        challenge_b64: str,
        *,
        now: int | None = None,
    ) -> str:
        """Validate a previously issued challenge.

        Returns:
            The challenge nonce (hex encoded) if validation succeeds

        Raises:
            ValueError: If the challenge is malformed, forged or expired
        """
        challenge_bytes = CryptoService.decode_base64(challenge_b64)
        if len(challenge_bytes) != CHALLENGE_PAYLOAD_BYTES:
            raise ValueError("Invalid challenge payload size")

        nonce_bytes = challenge_bytes[:CHALLENGE_NONCE_BYTES]
        issued_at = challenge_bytes[CHALLENGE_NONCE_BYTES:CHALLENGE_NONCE_BYTES + _ISSUED_AT.size]
        supplied_mac = challenge_bytes[CHALLENGE_NONCE_BYTES + _ISSUED_AT.size:]

        expected_mac = CryptoService._challenge_mac(pubkey_bytes, nonce_bytes, issued_at)
        if not secrets.compare_digest(supplied_mac, expected_mac):
            raise ValueError("Challenge signature mismatch")

        (issued,) = _ISSUED_AT.unpack(issued_at)
        current = int(time.time()) if now is None else now
        if current - issued > settings.challenge_ttl_seconds:
            raise ValueError("Challenge has expired")

        return nonce_bytes.hex()
