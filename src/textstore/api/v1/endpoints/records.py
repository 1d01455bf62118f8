# src/textstore/api/v1/endpoints/records.py
"""Record lifecycle endpoints for the Textstore API.

Record store errors propagate to the exception handler registered in
`textstore.main`, which maps each error kind to a status code.
"""

from fastapi import APIRouter, status

from textstore.api.v1.dependencies import AddressDep, CurrentIdentityDep, RecordStoreDep
from textstore.schemas.record import (
    CounterResponse,
    DeleteResponse,
    RecordResponse,
    RecordWrite,
)

router = APIRouter(prefix="/records", tags=["records"])


@router.post(
    "/initialize",
    response_model=CounterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def initialize_store(
    caller: CurrentIdentityDep,
    store: RecordStoreDep,
) -> CounterResponse:
    """Create the global counter; the caller becomes administrator.

    Raises:
        AlreadyInitialized: If the counter already exists
    """
    state = store.initialize(caller)
    return CounterResponse.from_state(state, store.counter_address)


@router.post(
    "/",
    response_model=RecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_record(
    payload: RecordWrite,
    caller: CurrentIdentityDep,
    store: RecordStoreDep,
) -> RecordResponse:
    """Create a record owned by the caller at the next counter-derived address."""
    record = store.create_text(caller, payload.title, payload.content)
    return RecordResponse.from_record(record, store.record_address(record.id))


@router.get("/{record_id}", response_model=RecordResponse)
async def read_record(
    record_id: int,
    store: RecordStoreDep,
    address: AddressDep,
) -> RecordResponse:
    """Return a record by id. No authentication is required."""
    derived = store.record_address(record_id, address)
    record = store.read(record_id, address=derived)
    return RecordResponse.from_record(record, derived)


@router.put("/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: int,
    payload: RecordWrite,
    caller: CurrentIdentityDep,
    store: RecordStoreDep,
    address: AddressDep,
) -> RecordResponse:
    """Replace title and content of a record owned by the caller."""
    derived = store.record_address(record_id, address)
    record = store.update(
        caller,
        record_id,
        payload.title,
        payload.content,
        address=derived,
    )
    return RecordResponse.from_record(record, derived)


@router.delete("/{record_id}", response_model=DeleteResponse)
async def delete_record(
    record_id: int,
    caller: CurrentIdentityDep,
    store: RecordStoreDep,
    address: AddressDep,
) -> DeleteResponse:
    """Close a record; the deposit is refunded to the caller.

    The record owner and the administrator may both delete.
    """
    refunded = store.delete(caller, record_id, address=address)
    return DeleteResponse(id=record_id, refunded=refunded)
