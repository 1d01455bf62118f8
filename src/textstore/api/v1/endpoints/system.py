# src/textstore/api/v1/endpoints/system.py
"""System state endpoints."""

from fastapi import APIRouter

from textstore.api.v1.dependencies import CurrentIdentityDep, RecordStoreDep
from textstore.schemas.record import CounterResponse

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/counter", response_model=CounterResponse)
async def get_counter(store: RecordStoreDep) -> CounterResponse:
    """Return the verified global counter."""
    state = store.counter()
    return CounterResponse.from_state(state, store.counter_address)


@router.get("/deposits/me")
async def get_my_deposits(caller: CurrentIdentityDep, store: RecordStoreDep) -> dict[str, int]:
    """Return the caller's net deposit flow (refunds minus charges)."""
    return {"balance": store.deposit_balance(caller)}
