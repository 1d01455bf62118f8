"""Binary layouts of the accounts owned by the record store.

Each account starts with an 8-byte discriminator, the first bytes of
``sha256(b"account:<Name>")``, followed by little-endian fields. Strings are a
u32 byte length and UTF-8 bytes. Allocated space always covers the maximum
string lengths, so an account never needs to grow.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass
from typing import ClassVar

from textstore.core.errors import AccountDataError, ContentTooLong, InvalidText, TitleTooLong

__all__ = [
    "GlobalState",
    "TextRecord",
    "MAX_TITLE_BYTES",
    "MAX_CONTENT_BYTES",
    "DISCRIMINATOR_LENGTH",
    "check_text_bounds",
]

DISCRIMINATOR_LENGTH = 8
PUBKEY_LENGTH = 32
MAX_TITLE_BYTES = 50
MAX_CONTENT_BYTES = 1000

_U32 = struct.Struct("<I")


def _discriminator(name: str) -> bytes:
    return hashlib.sha256(f"account:{name}".encode()).digest()[:DISCRIMINATOR_LENGTH]


def _encode_text(field: str, text: str) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as err:
        # Lone surrogates survive JSON decoding but have no UTF-8 form.
        raise InvalidText(f"The {field} is not valid UTF-8 text at position {err.start}") from err


def check_text_bounds(title: str, content: str) -> tuple[bytes, bytes]:
    """Return the encoded title and content, enforcing their capacities."""
    title_bytes = _encode_text("title", title)
    if len(title_bytes) > MAX_TITLE_BYTES:
        raise TitleTooLong(f"Title is {len(title_bytes)} bytes; maximum is {MAX_TITLE_BYTES}")
    content_bytes = _encode_text("content", content)
    if len(content_bytes) > MAX_CONTENT_BYTES:
        raise ContentTooLong(
            f"Content is {len(content_bytes)} bytes; maximum is {MAX_CONTENT_BYTES}"
        )
    return title_bytes, content_bytes


class _Reader:
    """Sequential cursor over account bytes."""

    def __init__(self, data: bytes, offset: int) -> None:
        self._data = data
        self._offset = offset

    def take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._data):
            raise AccountDataError("Account data is truncated")
        chunk = self._data[self._offset:end]
        self._offset = end
        return chunk

    def unpack(self, fmt: struct.Struct) -> tuple:
        return fmt.unpack(self.take(fmt.size))

    def string(self, limit: int) -> str:
        (length,) = self.unpack(_U32)
        if length > limit:
            raise AccountDataError("Stored string exceeds its capacity")
        try:
            return self.take(length).decode("utf-8")
        except UnicodeDecodeError as err:
            raise AccountDataError(f"Stored string is not UTF-8: {err}") from err


def _body(data: bytes, discriminator: bytes) -> _Reader:
    if data[:DISCRIMINATOR_LENGTH] != discriminator:
        raise AccountDataError("Account discriminator mismatch")
    return _Reader(data, DISCRIMINATOR_LENGTH)


@dataclass(frozen=True)
class GlobalState:
    """Singleton counter account."""

    admin: bytes
    total_text_created: int
    bump: int

    NAME: ClassVar[str] = "GlobalState"
    DISCRIMINATOR: ClassVar[bytes] = _discriminator("GlobalState")
    _FIELDS: ClassVar[struct.Struct] = struct.Struct("<32sQB")
    INIT_SPACE: ClassVar[int] = _FIELDS.size
    SPACE: ClassVar[int] = DISCRIMINATOR_LENGTH + INIT_SPACE

    def encode(self) -> bytes:
        return self.DISCRIMINATOR + self._FIELDS.pack(
            self.admin, self.total_text_created, self.bump
        )

    @classmethod
    def decode(cls, data: bytes) -> GlobalState:
        admin, total, bump = _body(data, cls.DISCRIMINATOR).unpack(cls._FIELDS)
        return cls(admin=admin, total_text_created=total, bump=bump)


@dataclass(frozen=True)
class TextRecord:
    """A text record account."""

    id: int
    owner: bytes
    title: str
    content: str
    created_at: int
    updated_at: int
    bump: int

    NAME: ClassVar[str] = "Text"
    DISCRIMINATOR: ClassVar[bytes] = _discriminator("Text")
    _HEAD: ClassVar[struct.Struct] = struct.Struct("<Q32s")
    _TAIL: ClassVar[struct.Struct] = struct.Struct("<qqB")
    INIT_SPACE: ClassVar[int] = (
        _HEAD.size
        + _U32.size + MAX_TITLE_BYTES
        + _U32.size + MAX_CONTENT_BYTES
        + _TAIL.size
    )
    SPACE: ClassVar[int] = DISCRIMINATOR_LENGTH + INIT_SPACE

    def encode(self) -> bytes:
        title_bytes, content_bytes = check_text_bounds(self.title, self.content)
        return b"".join(
            (
                self.DISCRIMINATOR,
                self._HEAD.pack(self.id, self.owner),
                _U32.pack(len(title_bytes)),
                title_bytes,
                _U32.pack(len(content_bytes)),
                content_bytes,
                self._TAIL.pack(self.created_at, self.updated_at, self.bump),
            )
        )

    @classmethod
    def decode(cls, data: bytes) -> TextRecord:
        reader = _body(data, cls.DISCRIMINATOR)
        record_id, owner = reader.unpack(cls._HEAD)
        title = reader.string(MAX_TITLE_BYTES)
        content = reader.string(MAX_CONTENT_BYTES)
        created_at, updated_at, bump = reader.unpack(cls._TAIL)
        return cls(
            id=record_id,
            owner=owner,
            title=title,
            content=content,
            created_at=created_at,
            updated_at=updated_at,
            bump=bump,
        )
