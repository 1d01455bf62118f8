"""Shared API dependencies for authentication and record store access."""

import base64
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from textstore.core.settings import settings
from textstore.db.session import get_db
from textstore.services.record_service import IDENTITY_LENGTH, RecordStore

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode_identity(subject: str) -> bytes:
    """Decode a base64-encoded caller identity.

    Raises:
        HTTPException: If the subject is not a 32-byte key
    """
    padding = "=" * (-len(subject) % 4)
    try:
        identity = base64.urlsafe_b64decode(subject + padding)
    except Exception as err:  # pragma: no cover - defensive
        raise _credentials_error() from err
    if len(identity) != IDENTITY_LENGTH:
        raise _credentials_error()
    return identity


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> bytes:
    """Resolve the caller identity from a JWT bearer token.

    Returns:
        Raw 32-byte Ed25519 public key of the caller

    Raises:
        HTTPException: If the token is invalid or expired
    """
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise _credentials_error() from err
    subject = payload.get("sub")
    if not isinstance(subject, str):
        raise _credentials_error()
    return _decode_identity(subject)


def get_record_store(db: SessionDep) -> RecordStore:
    """Return a record store bound to the request session."""
    return RecordStore(db)


def get_address_override(
    address: Annotated[
        str | None,
        Query(description="Expected record address (hex); must match the derivation"),
    ] = None,
) -> bytes | None:
    """Decode the optional caller-supplied record address."""
    if address is None:
        return None
    try:
        return bytes.fromhex(address)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Address must be hex encoded",
        ) from err


# Type aliases for common dependencies
CurrentIdentityDep = Annotated[bytes, Depends(get_current_identity)]
RecordStoreDep = Annotated[RecordStore, Depends(get_record_store)]
AddressDep = Annotated[bytes | None, Depends(get_address_override)]
