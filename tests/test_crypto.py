"""Tests for key and challenge encoding helpers."""

import base64

import pytest

from textstore.services.crypto import CryptoService, encode_b64


def test_decode_base64_accepts_missing_padding() -> None:
    data = bytes(range(32))
    assert CryptoService.decode_base64(encode_b64(data)) == data
    assert CryptoService.decode_base64(base64.urlsafe_b64encode(data).decode()) == data


def test_decode_base64_rejects_garbage() -> None:
    with pytest.raises(ValueError, match="Invalid base64"):
        CryptoService.decode_base64("a")


def test_pubkey_accepts_hex_or_base64() -> None:
    key = bytes(range(32))
    assert CryptoService.validate_and_decode_pubkey(key.hex()) == key
    assert CryptoService.validate_and_decode_pubkey(encode_b64(key)) == key
    with pytest.raises(ValueError, match="Invalid public key format"):
        CryptoService.validate_and_decode_pubkey(encode_b64(b"short"))
