"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel, Field


class ChallengeRequest(BaseModel):
    """Request to obtain a login challenge."""

    pubkey: str = Field(..., description="Ed25519 public key (32 bytes, hex or base64)")


class ChallengeResponse(BaseModel):
    """Challenge payload returned to clients before authentication."""

    challenge: str = Field(..., description="Base64 challenge that must be signed")
    expires_in: int = Field(..., description="Seconds the challenge stays valid")


class LoginRequest(BaseModel):
    """Proof that the client controls the submitted public key."""

    pubkey: str = Field(..., description="Ed25519 public key (32 bytes, hex or base64)")
    challenge: str = Field(..., description="Challenge returned by /auth/challenge")
    signature: str = Field(..., description="Base64 Ed25519 signature over the challenge bytes")


class LoginResponse(BaseModel):
    """Bearer token issued after a successful login."""

    access_token: str
    token_type: str = "bearer"
