"""Data access layer."""

from .account_repo import AccountLedger, rent_exempt_minimum

__all__ = ["AccountLedger", "rent_exempt_minimum"]
