# src/textstore/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import ChallengeRequest, ChallengeResponse, LoginRequest, LoginResponse
from .record import CounterResponse, DeleteResponse, RecordResponse, RecordWrite

__all__ = [
    "ChallengeRequest", "ChallengeResponse",
    "LoginRequest", "LoginResponse",
    "CounterResponse", "DeleteResponse",
    "RecordResponse", "RecordWrite",
]
