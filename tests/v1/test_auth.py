# tests/v1/test_auth.py
"""Tests for the challenge/login flow."""

import base64
import time

from fastapi import status
from jose import jwt

from textstore.core.settings import settings
from textstore.services.crypto import CryptoService


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


def _challenge(client, identity) -> str:
    response = client.post("/api/v1/auth/challenge", json={"pubkey": identity.pubkey_hex})
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["expires_in"] == settings.challenge_ttl_seconds
    return body["challenge"]


def _sign(identity, challenge: str) -> str:
    challenge_bytes = CryptoService.decode_base64(challenge)
    return _b64(identity.signing_key.sign(challenge_bytes).signature)


def test_login_issues_token_for_key(client, alice) -> None:
    challenge = _challenge(client, alice)
    response = client.post(
        "/api/v1/auth/login",
        json={
            "pubkey": _b64(alice.pubkey),
            "challenge": challenge,
            "signature": _sign(alice, challenge),
        },
    )
    assert response.status_code == status.HTTP_200_OK
    token = response.json()["access_token"]
    claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    assert claims["sub"] == _b64(alice.pubkey)


def test_token_from_login_authorizes_requests(client, alice) -> None:
    challenge = _challenge(client, alice)
    token = client.post(
        "/api/v1/auth/login",
        json={
            "pubkey": alice.pubkey_hex,
            "challenge": challenge,
            "signature": _sign(alice, challenge),
        },
    ).json()["access_token"]

    response = client.post(
        "/api/v1/records/initialize",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["admin"] == alice.pubkey_hex


def test_login_rejects_signature_from_other_key(client, alice, bob) -> None:
    challenge = _challenge(client, alice)
    response = client.post(
        "/api/v1/auth/login",
        json={
            "pubkey": alice.pubkey_hex,
            "challenge": challenge,
            "signature": _sign(bob, challenge),
        },
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_rejects_challenge_for_other_key(client, alice, bob) -> None:
    challenge = _challenge(client, bob)
    response = client.post(
        "/api/v1/auth/login",
        json={
            "pubkey": alice.pubkey_hex,
            "challenge": challenge,
            "signature": _sign(alice, challenge),
        },
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "mismatch" in response.json()["detail"]


def test_login_rejects_replayed_challenge(client, alice) -> None:
    challenge = _challenge(client, alice)
    payload = {
        "pubkey": alice.pubkey_hex,
        "challenge": challenge,
        "signature": _sign(alice, challenge),
    }
    assert client.post("/api/v1/auth/login", json=payload).status_code == status.HTTP_200_OK
    response = client.post("/api/v1/auth/login", json=payload)
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_login_rejects_expired_challenge(client, alice) -> None:
    issued = int(time.time()) - settings.challenge_ttl_seconds - 10
    challenge = CryptoService.issue_auth_challenge(alice.pubkey, now=issued)
    response = client.post(
        "/api/v1/auth/login",
        json={
            "pubkey": alice.pubkey_hex,
            "challenge": challenge,
            "signature": _sign(alice, challenge),
        },
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "expired" in response.json()["detail"]


def test_challenge_rejects_malformed_pubkey(client) -> None:
    response = client.post("/api/v1/auth/challenge", json={"pubkey": "abcd"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
