"""Record lifecycle: initialize, create, read, update and delete.

Every record lives at ``derive(b"text", id)`` where ``id`` is the value of the
global counter when the record was created. The counter itself lives at
``derive(b"global")``. Each operation re-derives the addresses it touches and
re-verifies the stored bump before trusting any account, runs every check
before the first write, and commits once at the end.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace

from sqlalchemy.orm import Session

from textstore.core.errors import (
    AccountDataError,
    AlreadyInitialized,
    CounterOverflow,
    InvalidCounterRecord,
    NotInitialized,
    RecordNotFound,
)
from textstore.core.settings import settings
from textstore.db.time import unix_timestamp
from textstore.models.account import LedgerAccount
from textstore.repositories.account_repo import AccountLedger
from textstore.services.access import require_owner, require_owner_or_admin
from textstore.services.codec import GlobalState, TextRecord, check_text_bounds
from textstore.services.derivation import (
    COUNTER_TAG,
    RECORD_TAG,
    AddressDeriver,
    record_seed,
)
from textstore.services.locks import hold_addresses

__all__ = ["RecordStore", "U64_MAX"]

logger = logging.getLogger(__name__)

U64_MAX = 2**64 - 1
IDENTITY_LENGTH = 32


def _check_identity(caller: bytes) -> None:
    if len(caller) != IDENTITY_LENGTH:
        raise ValueError("Caller identity must be a 32-byte public key")


class RecordStore:
    """Record store bound to one database session."""

    def __init__(
        self,
        session: Session,
        *,
        deriver: AddressDeriver | None = None,
        clock: Callable[[], int] = unix_timestamp,
    ) -> None:
        """Initialize the store.

        Args:
            session: Session used for every ledger access.
            deriver: Address deriver; defaults to the configured program id.
            clock: Source of Unix timestamps for record times.
        """
        self.session = session
        self.deriver = deriver or AddressDeriver(settings.program_id_bytes)
        self.ledger = AccountLedger(session, self.deriver.program_id)
        self.clock = clock
        self.counter_address, self.counter_bump = self.deriver.counter_address()

    # -- helpers ---------------------------------------------------------------

    @contextmanager
    def _transaction(self, *addresses: bytes) -> Iterator[None]:
        """Run the block under address locks as a single all-or-nothing commit."""
        with hold_addresses(*addresses):
            try:
                yield
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise

    def _load_counter(self) -> tuple[LedgerAccount, GlobalState]:
        account = self.ledger.load(self.counter_address)
        if account is None:
            raise NotInitialized()
        if account.owner_program != self.deriver.program_id:
            raise InvalidCounterRecord("Counter account is owned by another program")
        try:
            state = GlobalState.decode(account.data)
        except AccountDataError as err:
            raise InvalidCounterRecord(str(err)) from err
        if not self.deriver.verify(COUNTER_TAG, b"", state.bump, self.counter_address):
            raise InvalidCounterRecord()
        return account, state

    def record_address(self, record_id: int, address: bytes | None = None) -> bytes:
        """Return the derived address of `record_id`.

        A caller-supplied `address` must match the derivation.
        """
        if not 0 <= record_id <= U64_MAX:
            raise RecordNotFound(f"Record id {record_id} is out of range")
        derived, _ = self.deriver.record_address(record_id)
        if address is not None and address != derived:
            raise RecordNotFound(f"Address does not belong to record {record_id}")
        return derived

    def _load_record(self, record_id: int, address: bytes) -> tuple[LedgerAccount, TextRecord]:
        account = self.ledger.load(address)
        if account is None or account.owner_program != self.deriver.program_id:
            raise RecordNotFound(f"Record {record_id} not found")
        try:
            record = TextRecord.decode(account.data)
        except AccountDataError as err:
            raise RecordNotFound(f"Record {record_id} not found") from err
        if record.id != record_id or not self.deriver.verify(
            RECORD_TAG, record_seed(record_id), record.bump, address
        ):
            raise RecordNotFound(f"Record {record_id} failed address verification")
        return account, record

    # -- operations ------------------------------------------------------------

    def initialize(self, caller: bytes) -> GlobalState:
        """Create the global counter with `caller` as administrator."""
        _check_identity(caller)
        with self._transaction(self.counter_address):
            if self.ledger.load(self.counter_address) is not None:
                raise AlreadyInitialized()
            state = GlobalState(admin=caller, total_text_created=0, bump=self.counter_bump)
            self.ledger.allocate(
                self.counter_address,
                space=GlobalState.SPACE,
                payer=caller,
                data=state.encode(),
            )
        logger.info("Initialized record store; administrator %s", caller.hex())
        return state

    def counter(self) -> GlobalState:
        """Return a verified snapshot of the global counter."""
        with self._transaction(self.counter_address):
            _, state = self._load_counter()
        return state

    def create_text(self, caller: bytes, title: str, content: str) -> TextRecord:
        """Store a new record owned by `caller` at the next counter-derived address."""
        _check_identity(caller)
        check_text_bounds(title, content)
        with self._transaction(self.counter_address):
            counter_account, state = self._load_counter()
            record_id = state.total_text_created
            if record_id == U64_MAX:
                raise CounterOverflow()
            address, bump = self.deriver.record_address(record_id)
            with hold_addresses(address):
                now = self.clock()
                record = TextRecord(
                    id=record_id,
                    owner=caller,
                    title=title,
                    content=content,
                    created_at=now,
                    updated_at=now,
                    bump=bump,
                )
                self.ledger.allocate(
                    address,
                    space=TextRecord.SPACE,
                    payer=caller,
                    data=record.encode(),
                )
                self.ledger.store(
                    counter_account,
                    replace(state, total_text_created=record_id + 1).encode(),
                )
        logger.info("Created record %d at %s", record_id, address.hex())
        return record

    def read(self, record_id: int, *, address: bytes | None = None) -> TextRecord:
        """Return a snapshot of a record. Reading is public."""
        derived = self.record_address(record_id, address)
        with self._transaction(self.counter_address, derived):
            self._load_counter()
            _, record = self._load_record(record_id, derived)
        return record

    def update(
        self,
        caller: bytes,
        record_id: int,
        new_title: str,
        new_content: str,
        *,
        address: bytes | None = None,
    ) -> TextRecord:
        """Replace title and content of a record owned by `caller`."""
        _check_identity(caller)
        derived = self.record_address(record_id, address)
        with self._transaction(derived):
            account, record = self._load_record(record_id, derived)
            require_owner(caller, record)
            check_text_bounds(new_title, new_content)
            updated = replace(
                record,
                title=new_title,
                content=new_content,
                updated_at=max(self.clock(), record.updated_at),
            )
            self.ledger.store(account, updated.encode())
        logger.info("Updated record %d", record_id)
        return updated

    def delete(self, caller: bytes, record_id: int, *, address: bytes | None = None) -> int:
        """Close a record and refund its deposit to `caller`.

        The owner and the administrator may both delete. Returns the refund.
        """
        _check_identity(caller)
        derived = self.record_address(record_id, address)
        with self._transaction(self.counter_address, derived):
            counter_account, state = self._load_counter()
            account, record = self._load_record(record_id, derived)
            require_owner_or_admin(caller, record, state)
            if state.total_text_created == 0:
                raise CounterOverflow("Counter would drop below zero")
            refunded = self.ledger.close(account, refund_to=caller)
            self.ledger.store(
                counter_account,
                replace(state, total_text_created=state.total_text_created - 1).encode(),
            )
        logger.info("Deleted record %d; refunded %d to %s", record_id, refunded, caller.hex())
        return refunded

    def deposit_balance(self, identity: bytes) -> int:
        """Return the net deposit flow of `identity`."""
        return self.ledger.balance_of(identity)
