"""Extra tick array bitmaps for tick arrays beyond the pool's default bitmap."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from .bitmap import (
    EXTENSION_TICKARRAY_BITMAP_SIZE,
    TICK_ARRAY_BITMAP_SIZE,
    _int_to_words,
    _words_to_int,
    bitmap_offset,
    next_initialized_tick_array_in_bitmap,
    tick_array_offset_in_bitmap,
)
from .errors import AmmError, ErrorCode
from .tick import MAX_TICK, MIN_TICK
from .tick_array import get_array_start_index, tick_count

POOL_TICK_ARRAY_BITMAP_SEED = "pool_tick_array_bitmap_extension"

_DISCRIMINATOR = hashlib.sha256(b"account:TickArrayBitmapExtension").digest()[:8]
_WORDS = 8
_U64_MAX = (1 << 64) - 1
_BITMAP_MASK = (1 << TICK_ARRAY_BITMAP_SIZE) - 1


def _empty_bitmaps() -> list[list[int]]:
    return [[0] * _WORDS for _ in range(EXTENSION_TICKARRAY_BITMAP_SIZE)]


def _check_bitmaps(bitmaps: list[list[int]], name: str) -> list[list[int]]:
    rows = [list(row) for row in bitmaps]
    if len(rows) != EXTENSION_TICKARRAY_BITMAP_SIZE:
        raise ValueError(f"{name} must hold {EXTENSION_TICKARRAY_BITMAP_SIZE} bitmaps")
    for row in rows:
        if len(row) != _WORDS or any(not 0 <= w <= _U64_MAX for w in row):
            raise ValueError(f"each bitmap in {name} must be {_WORDS} unsigned 64-bit words")
    return rows


@dataclass
class TickArrayBitmapExtension:
    """Initialization bitmaps for tick arrays outside the default range."""

    pool_id: bytes = bytes(32)
    positive_tick_array_bitmap: list[list[int]] = field(default_factory=_empty_bitmaps)
    negative_tick_array_bitmap: list[list[int]] = field(default_factory=_empty_bitmaps)

    LEN = 8 + 32 + 64 * EXTENSION_TICKARRAY_BITMAP_SIZE * 2
    DISCRIMINATOR = _DISCRIMINATOR

    def __post_init__(self) -> None:
        self.pool_id = bytes(self.pool_id)
        if len(self.pool_id) != 32:
            raise ValueError(f"pool_id must be 32 bytes, got {len(self.pool_id)}")
        self.positive_tick_array_bitmap = _check_bitmaps(
            self.positive_tick_array_bitmap, "positive_tick_array_bitmap"
        )
        self.negative_tick_array_bitmap = _check_bitmaps(
            self.negative_tick_array_bitmap, "negative_tick_array_bitmap"
        )

    def initialize(self, pool_id: bytes) -> None:
        """Bind to a pool and clear every bitmap."""
        pool_id = bytes(pool_id)
        if len(pool_id) != 32:
            raise ValueError(f"pool_id must be 32 bytes, got {len(pool_id)}")
        self.pool_id = pool_id
        self.positive_tick_array_bitmap = _empty_bitmaps()
        self.negative_tick_array_bitmap = _empty_bitmaps()

    def _side(self, tick_index: int) -> list[list[int]]:
        if tick_index < 0:
            return self.negative_tick_array_bitmap
        return self.positive_tick_array_bitmap

    def get_bitmap(self, tick_index: int, tick_spacing: int) -> tuple[int, list[int]]:
        """The offset and a copy of the bitmap holding the given tick array."""
        offset = bitmap_offset(tick_index, tick_spacing)
        return offset, list(self._side(tick_index)[offset])

    def check_tick_array_is_initialized(
        self, tick_array_start_index: int, tick_spacing: int
    ) -> tuple[bool, int]:
        """Whether the tick array's bit is set, with its start index."""
        _, words = self.get_bitmap(tick_array_start_index, tick_spacing)
        bit = tick_array_offset_in_bitmap(tick_array_start_index, tick_spacing)
        is_set = bool((_words_to_int(words) >> bit) & 1)
        return is_set, tick_array_start_index

    def flip_tick_array_bit(self, tick_array_start_index: int, tick_spacing: int) -> None:
        """Toggle the bit of the given tick array."""
        offset, words = self.get_bitmap(tick_array_start_index, tick_spacing)
        bit = tick_array_offset_in_bitmap(tick_array_start_index, tick_spacing)
        flipped = (_words_to_int(words) ^ (1 << bit)) & _BITMAP_MASK
        self._side(tick_array_start_index)[offset] = _int_to_words(flipped)

    def next_initialized_tick_array_from_one_bitmap(
        self, last_tick_array_start_index: int, tick_spacing: int, zero_for_one: bool
    ) -> tuple[bool, int]:
        """Search the bitmap holding the neighbouring tick array.

        Returns ``(True, start_index)`` if an initialized tick array is found,
        otherwise ``(False, boundary)``.
        """
        step = tick_count(tick_spacing)
        if zero_for_one:
            next_start = last_tick_array_start_index - step
        else:
            next_start = last_tick_array_start_index + step
        min_start = get_array_start_index(MIN_TICK, tick_spacing)
        max_start = get_array_start_index(MAX_TICK, tick_spacing)
        if next_start < min_start or next_start > max_start:
            return False, next_start
        _, words = self.get_bitmap(next_start, tick_spacing)
        return next_initialized_tick_array_in_bitmap(
            words, next_start, tick_spacing, zero_for_one
        )

    def to_bytes(self) -> bytes:
        """Serialize the account, discriminator included."""
        try:
            parts = [_DISCRIMINATOR, self.pool_id]
            for rows in (self.positive_tick_array_bitmap, self.negative_tick_array_bitmap):
                parts.extend(w.to_bytes(8, "little") for row in rows for w in row)
        except OverflowError as exc:
            raise AmmError(ErrorCode.ACCOUNT_DID_NOT_SERIALIZE) from exc
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "TickArrayBitmapExtension":
        """Parse an account previously written by ``to_bytes``."""
        data = bytes(data)
        if len(data) < 8 or data[:8] != _DISCRIMINATOR:
            raise AmmError(ErrorCode.ACCOUNT_DISCRIMINATOR_MISMATCH)
        if len(data) < cls.LEN:
            raise AmmError(ErrorCode.ACCOUNT_DID_NOT_DESERIALIZE)
        pool_id = data[8:40]

        def read_rows(start: int) -> list[list[int]]:
            return [
                [
                    int.from_bytes(data[at:at + 8], "little")
                    for at in range(start + r * 64, start + (r + 1) * 64, 8)
                ]
                for r in range(EXTENSION_TICKARRAY_BITMAP_SIZE)
            ]

        half = 64 * EXTENSION_TICKARRAY_BITMAP_SIZE
        return cls(
            pool_id=pool_id,
            positive_tick_array_bitmap=read_rows(40),
            negative_tick_array_bitmap=read_rows(40 + half),
        )