# src/textstore/api/v1/endpoints/auth.py
"""Authentication endpoints for the Textstore API."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from jose import jwt

from textstore.core.security import verify_signature
from textstore.core.settings import settings
from textstore.schemas.auth import (
    ChallengeRequest,
    ChallengeResponse,
    LoginRequest,
    LoginResponse,
)
from textstore.services.crypto import CryptoService, encode_b64
from textstore.services.replay import ReplayProtectionService, get_replay_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])
crypto_service = CryptoService()


def get_replay_service_dep() -> ReplayProtectionService:
    return get_replay_service()


ReplayServiceDep = Annotated[ReplayProtectionService, Depends(get_replay_service_dep)]


def _decode_pubkey(pubkey: str) -> bytes:
    try:
        return crypto_service.validate_and_decode_pubkey(pubkey)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(err),
        ) from err


def _decode_b64(field: str, data: str) -> bytes:
    try:
        return crypto_service.decode_base64(data)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid base64 encoding for {field}",
        ) from err


def create_access_token(subject: bytes | str, extra_claims: dict[str, str] | None = None) -> str:
    """Create JWT access token for caller authentication."""
    sub = subject if isinstance(subject, str) else encode_b64(subject)
    to_encode: dict[str, object] = {"sub": sub}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


@router.post(
    "/challenge",
    summary="Issue a login challenge",
    response_model=ChallengeResponse,
)
async def issue_challenge(payload: ChallengeRequest) -> ChallengeResponse:
    """Provide clients with a challenge to sign with their key."""
    pubkey_bytes = _decode_pubkey(payload.pubkey)
    challenge = crypto_service.issue_auth_challenge(pubkey_bytes)
    return ChallengeResponse(
        challenge=challenge,
        expires_in=settings.challenge_ttl_seconds,
    )


@router.post(
    "/login",
    summary="Authenticate with Ed25519 key",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
)
async def login(
    payload: LoginRequest,
    replay_service: ReplayServiceDep,
) -> LoginResponse:
    """Exchange a signed challenge for a bearer token."""
    pubkey_bytes = _decode_pubkey(payload.pubkey)
    pubkey_hex = pubkey_bytes.hex()

    try:
        nonce_hex = crypto_service.validate_auth_challenge(pubkey_bytes, payload.challenge)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(err),
        ) from err

    challenge_bytes = _decode_b64("challenge", payload.challenge)
    signature_bytes = _decode_b64("signature", payload.signature)
    if not verify_signature(pubkey_bytes, challenge_bytes, signature_bytes):
        logger.warning("Rejected login for %s: invalid signature", pubkey_hex)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed: invalid signature",
        )

    if not replay_service.register_replay(pubkey_hex, nonce_hex):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Challenge has already been used",
        )

    logger.info("Issued access token for %s", pubkey_hex)
    return LoginResponse(access_token=create_access_token(pubkey_bytes))
