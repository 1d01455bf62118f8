"""Authorization checks run before any record mutation."""
from __future__ import annotations

import logging

from textstore.core.errors import Unauthorized
from textstore.services.codec import GlobalState, TextRecord

logger = logging.getLogger(__name__)


def is_owner(caller: bytes, record: TextRecord) -> bool:
    return caller == record.owner


def is_admin(caller: bytes, counter: GlobalState) -> bool:
    return caller == counter.admin


def require_owner(caller: bytes, record: TextRecord) -> None:
    """Raise `Unauthorized` unless `caller` owns `record`."""
    if not is_owner(caller, record):
        logger.warning("Rejected update of record %d by non-owner %s", record.id, caller.hex())
        raise Unauthorized()


def require_owner_or_admin(caller: bytes, record: TextRecord, counter: GlobalState) -> None:
    """Raise `Unauthorized` unless `caller` owns `record` or administers the store.

    Either right on its own is sufficient.
    """
    if is_owner(caller, record) or is_admin(caller, counter):
        return
    logger.warning("Rejected delete of record %d by %s", record.id, caller.hex())
    raise Unauthorized("Unauthorized: Signer is neither the owner nor the administrator")
