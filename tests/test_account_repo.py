"""Tests for the SQL-backed account ledger."""

import hashlib

import pytest
from sqlalchemy.orm import Session

from textstore.core.errors import AddressInUse, InsufficientSpace
from textstore.repositories.account_repo import AccountLedger, rent_exempt_minimum

PROGRAM_ID = hashlib.sha256(b"ledger-test").digest()
ADDRESS = hashlib.sha256(b"address").digest()
PAYER = b"\x01" * 32
CLOSER = b"\x02" * 32


@pytest.fixture()
def ledger(db_session: Session) -> AccountLedger:
    return AccountLedger(db_session, PROGRAM_ID)


def test_rent_exempt_minimum() -> None:
    """Deposit is (128 + space) bytes at 3480 per byte-year, held for two years."""
    assert rent_exempt_minimum(0) == 890_880
    assert rent_exempt_minimum(49) == (128 + 49) * 3480 * 2
    assert rent_exempt_minimum(10, lamports_per_byte_year=1, exemption_threshold=1.0) == 138


def test_allocate_charges_payer(ledger: AccountLedger) -> None:
    account = ledger.allocate(ADDRESS, space=16, payer=PAYER, data=b"abc")
    assert account.owner_program == PROGRAM_ID
    assert account.lamports == rent_exempt_minimum(16)
    assert ledger.balance_of(PAYER) == -rent_exempt_minimum(16)
    assert ledger.load(ADDRESS).data == b"abc"


def test_allocate_rejects_occupied_address(ledger: AccountLedger) -> None:
    ledger.allocate(ADDRESS, space=16, payer=PAYER, data=b"")
    with pytest.raises(AddressInUse):
        ledger.allocate(ADDRESS, space=16, payer=CLOSER, data=b"")
    assert ledger.balance_of(CLOSER) == 0


def test_data_must_fit_space(ledger: AccountLedger) -> None:
    with pytest.raises(InsufficientSpace):
        ledger.allocate(ADDRESS, space=2, payer=PAYER, data=b"abc")
    account = ledger.allocate(ADDRESS, space=4, payer=PAYER, data=b"ab")
    with pytest.raises(InsufficientSpace):
        ledger.store(account, b"abcde")
    ledger.store(account, b"abcd")
    assert ledger.load(ADDRESS).data == b"abcd"


def test_close_refunds_whole_deposit(ledger: AccountLedger) -> None:
    account = ledger.allocate(ADDRESS, space=16, payer=PAYER, data=b"")
    refunded = ledger.close(account, refund_to=CLOSER)
    assert refunded == rent_exempt_minimum(16)
    assert ledger.load(ADDRESS) is None
    assert ledger.balance_of(CLOSER) == refunded
    assert ledger.balance_of(PAYER) == -refunded
