# src/textstore/models/deposit.py
"""Journal of storage deposits charged and refunded by the ledger."""

from sqlalchemy import BigInteger, Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from textstore.db.session import Base

DEPOSIT_KIND_CHARGE = "charge"
DEPOSIT_KIND_REFUND = "refund"


class DepositEntry(Base):
    """Signed deposit movement for one identity.

    Charges are negative, refunds positive; the sum over an identity is its
    net deposit flow.
    """

    __tablename__ = "deposit_entry"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    address: Mapped[bytes] = mapped_column(LargeBinary(32), nullable=False, index=True)
    identity: Mapped[bytes] = mapped_column(LargeBinary(32), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
