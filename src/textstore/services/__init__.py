# src/textstore/services/__init__.py
"""Business logic services for the Textstore application."""

from .crypto import CryptoService
from .derivation import AddressDeriver
from .record_service import RecordStore
from .replay import ReplayProtectionService

__all__ = [
    "AddressDeriver",
    "CryptoService",
    "RecordStore",
    "ReplayProtectionService",
]
