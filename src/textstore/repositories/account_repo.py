"""Data access helpers for the key-addressed account ledger."""
from __future__ import annotations

import logging
import math

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from textstore.core.errors import AddressInUse, InsufficientSpace
from textstore.core.settings import settings
from textstore.models.account import LedgerAccount
from textstore.models.deposit import (
    DEPOSIT_KIND_CHARGE,
    DEPOSIT_KIND_REFUND,
    DepositEntry,
)

__all__ = ["AccountLedger", "rent_exempt_minimum"]

logger = logging.getLogger(__name__)

# Bytes of bookkeeping the ledger charges for on top of every allocation.
ACCOUNT_STORAGE_OVERHEAD = 128


def rent_exempt_minimum(
    space: int,
    *,
    lamports_per_byte_year: int | None = None,
    exemption_threshold: float | None = None,
) -> int:
    """Return the deposit required to hold `space` bytes."""
    rate = lamports_per_byte_year
    if rate is None:
        rate = settings.lamports_per_byte_year
    threshold = exemption_threshold
    if threshold is None:
        threshold = settings.exemption_threshold
    return math.floor((ACCOUNT_STORAGE_OVERHEAD + space) * rate * threshold)


class AccountLedger:
    """Allocate, read, write and close storage at derived addresses.

    All methods only flush; committing is left to the caller so a whole
    operation lands in one transaction.
    """

    def __init__(self, session: Session, program_id: bytes) -> None:
        """Initialize the ledger for the program that owns its accounts."""
        self.session = session
        self.program_id = program_id

    def load(self, address: bytes) -> LedgerAccount | None:
        """Return the account at `address`, locking its row for the transaction."""
        stmt = select(LedgerAccount).where(LedgerAccount.address == address).with_for_update()
        return self.session.execute(stmt).scalars().first()

    def allocate(self, address: bytes, *, space: int, payer: bytes, data: bytes) -> LedgerAccount:
        """Create storage of `space` bytes at `address`, charging the deposit to `payer`.

        Args:
            address: Derived address for the new account.
            space: Fixed capacity in bytes.
            payer: Identity charged for the deposit.
            data: Initial contents; must fit in `space`.

        Raises:
            AddressInUse: If storage already exists at the address.
            InsufficientSpace: If `data` is larger than `space`.
        """
        if self.load(address) is not None:
            raise AddressInUse(f"Address {address.hex()} is already in use")
        if len(data) > space:
            raise InsufficientSpace()

        deposit = rent_exempt_minimum(space)
        account = LedgerAccount(
            address=address,
            owner_program=self.program_id,
            space=space,
            lamports=deposit,
            payer=payer,
            data=data,
        )
        self.session.add(account)
        self.session.add(
            DepositEntry(
                address=address,
                identity=payer,
                kind=DEPOSIT_KIND_CHARGE,
                amount=-deposit,
            )
        )
        self.session.flush()
        logger.debug("Allocated %d bytes at %s (deposit %d)", space, address.hex(), deposit)
        return account

    def store(self, account: LedgerAccount, data: bytes) -> None:
        """Overwrite the contents of an existing account."""
        if len(data) > account.space:
            raise InsufficientSpace()
        account.data = data
        self.session.flush()

    def close(self, account: LedgerAccount, *, refund_to: bytes) -> int:
        """Remove the account and refund its deposit to `refund_to`."""
        refunded = int(account.lamports)
        self.session.add(
            DepositEntry(
                address=account.address,
                identity=refund_to,
                kind=DEPOSIT_KIND_REFUND,
                amount=refunded,
            )
        )
        self.session.delete(account)
        self.session.flush()
        logger.debug("Closed %s, refunded %d", account.address.hex(), refunded)
        return refunded

    def balance_of(self, identity: bytes) -> int:
        """Return the net deposit flow of an identity (refunds minus charges)."""
        stmt = select(func.coalesce(func.sum(DepositEntry.amount), 0)).where(
            DepositEntry.identity == identity
        )
        return int(self.session.execute(stmt).scalar_one())
