"""Error taxonomy for the record store.

Every failure raised by the core carries a stable ``code`` (the class name)
and a numeric ``number`` so transports can report it without string matching.
Operations check everything before mutating, so any of these errors means the
ledger was left untouched.
"""

from __future__ import annotations

from typing import ClassVar

__all__ = [
    "RecordStoreError",
    "AlreadyInitialized",
    "InvalidCounterRecord",
    "NotInitialized",
    "RecordNotFound",
    "TitleTooLong",
    "ContentTooLong",
    "Unauthorized",
    "AddressInUse",
    "CounterOverflow",
    "DerivationError",
    "AccountDataError",
    "InsufficientSpace",
    "InvalidText",
]


class RecordStoreError(Exception):
    """Base class for all record store failures."""

    number: ClassVar[int] = 6000
    default_message: ClassVar[str] = "Record store error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def code(self) -> str:
        return type(self).__name__


class AlreadyInitialized(RecordStoreError):
    number = 6001
    default_message = "The global counter has already been initialized"


class InvalidCounterRecord(RecordStoreError):
    number = 6002
    default_message = "Global counter account failed address verification"


class NotInitialized(InvalidCounterRecord):
    number = 6003
    default_message = "The global counter has not been initialized"


class RecordNotFound(RecordStoreError):
    number = 6004
    default_message = "Record not found"


class TitleTooLong(RecordStoreError):
    number = 6005
    default_message = "Title exceeds 50 bytes"


class ContentTooLong(RecordStoreError):
    number = 6006
    default_message = "Content exceeds 1000 bytes"


class Unauthorized(RecordStoreError):
    number = 6007
    default_message = "Unauthorized: Signer is not the owner"


class AddressInUse(RecordStoreError):
    number = 6008
    default_message = "Derived address is already in use"


class CounterOverflow(RecordStoreError):
    number = 6009
    default_message = "Counter arithmetic overflowed"


class DerivationError(RecordStoreError):
    number = 6010
    default_message = "Unable to derive an off-curve address"


class AccountDataError(RecordStoreError):
    number = 6011
    default_message = "Account data does not match the expected layout"


class InsufficientSpace(RecordStoreError):
    number = 6012
    default_message = "Account data exceeds allocated space"


class InvalidText(RecordStoreError):
    number = 6013
    default_message = "Title and content must be valid Unicode text"
