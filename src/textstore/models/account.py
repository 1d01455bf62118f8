# src/textstore/models/account.py
"""Key-addressed storage accounts held by the ledger."""

from sqlalchemy import BigInteger, Integer, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from textstore.db.session import Base


class LedgerAccount(Base):
    """Fixed-size storage allocated at a derived address.

    The ledger never interprets `data`; layouts are owned by the program that
    allocated the account, identified by `owner_program`.
    """

    __tablename__ = "ledger_account"

    address: Mapped[bytes] = mapped_column(LargeBinary(32), primary_key=True)
    owner_program: Mapped[bytes] = mapped_column(LargeBinary(32), nullable=False)
    space: Mapped[int] = mapped_column(Integer, nullable=False)
    # Deposit held against the allocation; refunded in full on close.
    lamports: Mapped[int] = mapped_column(BigInteger, nullable=False)
    payer: Mapped[bytes] = mapped_column(LargeBinary(32), nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
