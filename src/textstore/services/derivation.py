"""Deterministic address derivation.

Addresses are SHA-256 digests of a domain tag, a seed, a one-byte bump and the
program id. A digest that happens to be a valid Ed25519 point could in
principle have a private key, so derivation walks the bump downward from 255
until the digest falls off the curve. The bump is stored with the account and
every later access re-derives the address from it.
"""

from __future__ import annotations

import hashlib
import struct
from collections.abc import Sequence

from textstore.core.errors import DerivationError

__all__ = [
    "AddressDeriver",
    "COUNTER_TAG",
    "RECORD_TAG",
    "create_program_address",
    "find_program_address",
    "is_on_curve",
    "record_seed",
]

MAX_SEED_LENGTH = 32
MAX_SEEDS = 16
PDA_MARKER = b"ProgramDerivedAddress"

COUNTER_TAG = b"global"
RECORD_TAG = b"text"

# Edwards25519 parameters
_P = 2**255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P


def is_on_curve(candidate: bytes) -> bool:
    """Return True if `candidate` decompresses to an Edwards25519 point.

    The top bit carries the sign of x and is ignored; y is reduced mod p.
    A point exists when (y^2 - 1) / (d*y^2 + 1) is a square.
    """
    if len(candidate) != 32:
        return False
    y = (int.from_bytes(candidate, "little") & ((1 << 255) - 1)) % _P
    y2 = y * y % _P
    u = (y2 - 1) % _P
    v = (_D * y2 + 1) % _P
    if u == 0:
        return True
    x2 = u * pow(v, _P - 2, _P) % _P
    return pow(x2, (_P - 1) // 2, _P) == 1


def _check_seeds(seeds: Sequence[bytes]) -> None:
    if len(seeds) > MAX_SEEDS:
        raise DerivationError(f"At most {MAX_SEEDS} seeds are allowed")
    for seed in seeds:
        if len(seed) > MAX_SEED_LENGTH:
            raise DerivationError(f"Seeds are limited to {MAX_SEED_LENGTH} bytes")


def create_program_address(seeds: Sequence[bytes], program_id: bytes) -> bytes:
    """Hash `seeds` under `program_id`, rejecting on-curve results."""
    _check_seeds(seeds)
    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(program_id)
    hasher.update(PDA_MARKER)
    address = hasher.digest()
    if is_on_curve(address):
        raise DerivationError("Derived address lies on the Ed25519 curve")
    return address


def find_program_address(seeds: Sequence[bytes], program_id: bytes) -> tuple[bytes, int]:
    """Return the first off-curve address and its bump, searching from 255 down."""
    for bump in range(255, -1, -1):
        try:
            address = create_program_address([*seeds, bytes([bump])], program_id)
        except DerivationError:
            continue
        return address, bump
    raise DerivationError("No viable bump found for seeds")


def record_seed(record_id: int) -> bytes:
    """Encode a record id as the u64 little-endian seed used for its address."""
    return struct.pack("<Q", record_id)


class AddressDeriver:
    """Derive and verify addresses for one program."""

    def __init__(self, program_id: bytes) -> None:
        if len(program_id) != 32:
            raise ValueError("program_id must be 32 bytes")
        self.program_id = program_id

    @staticmethod
    def _seeds(domain_tag: bytes, seed_bytes: bytes) -> list[bytes]:
        return [domain_tag, seed_bytes] if seed_bytes else [domain_tag]

    def derive(self, domain_tag: bytes, seed_bytes: bytes = b"") -> tuple[bytes, int]:
        """Return `(address, bump)` for a domain tag and seed."""
        return find_program_address(self._seeds(domain_tag, seed_bytes), self.program_id)

    def verify(self, domain_tag: bytes, seed_bytes: bytes, bump: int, address: bytes) -> bool:
        """Return True if `address` re-derives from the tag, seed and stored bump."""
        if not 0 <= bump <= 255:
            return False
        try:
            expected = create_program_address(
                [*self._seeds(domain_tag, seed_bytes), bytes([bump])],
                self.program_id,
            )
        except DerivationError:
            return False
        return expected == address

    def counter_address(self) -> tuple[bytes, int]:
        return self.derive(COUNTER_TAG)

    def record_address(self, record_id: int) -> tuple[bytes, int]:
        return self.derive(RECORD_TAG, record_seed(record_id))
