"""Record-related Pydantic schemas."""

from pydantic import BaseModel, Field

from textstore.services.codec import GlobalState, TextRecord


class RecordWrite(BaseModel):
    """Title and content submitted on create and update.

    Capacity limits are enforced by the record store so callers receive the
    specific TitleTooLong/ContentTooLong error.
    """

    title: str = Field(..., description="Record title (at most 50 UTF-8 bytes)")
    content: str = Field(..., description="Record body (at most 1000 UTF-8 bytes)")


class RecordResponse(BaseModel):
    """Snapshot of a stored record."""

    id: int
    address: str
    owner: str
    title: str
    content: str
    created_at: int
    updated_at: int
    bump: int

    @classmethod
    def from_record(cls, record: TextRecord, address: bytes) -> "RecordResponse":
        return cls(
            id=record.id,
            address=address.hex(),
            owner=record.owner.hex(),
            title=record.title,
            content=record.content,
            created_at=record.created_at,
            updated_at=record.updated_at,
            bump=record.bump,
        )


class CounterResponse(BaseModel):
    """Snapshot of the global counter."""

    address: str
    admin: str
    total_created: int
    bump: int

    @classmethod
    def from_state(cls, state: GlobalState, address: bytes) -> "CounterResponse":
        return cls(
            address=address.hex(),
            admin=state.admin.hex(),
            total_created=state.total_text_created,
            bump=state.bump,
        )


class DeleteResponse(BaseModel):
    """Result of closing a record."""

    id: int
    refunded: int = Field(..., description="Deposit returned to the caller")
