# src/textstore/models/__init__.py
"""SQLAlchemy models backing the account ledger."""

from .account import LedgerAccount
from .deposit import DepositEntry

__all__ = ["LedgerAccount", "DepositEntry"]
