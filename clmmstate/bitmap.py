"""Bit arithmetic for locating tick arrays in 512-bit initialization bitmaps."""

from __future__ import annotations

from typing import Sequence

from .errors import AmmError, ErrorCode
from .tick import MAX_TICK, MIN_TICK
from .tick_array import TICK_ARRAY_SIZE, is_valid_start_index, tick_count

TICK_ARRAY_BITMAP_SIZE = 512
EXTENSION_TICKARRAY_BITMAP_SIZE = 14

_WORDS = 8
_WORD_BITS = 64
_U64_MAX = (1 << _WORD_BITS) - 1
_BITMAP_MASK = (1 << TICK_ARRAY_BITMAP_SIZE) - 1


def _words_to_int(words: Sequence[int]) -> int:
    """Combine eight little-endian 64-bit words into one 512-bit integer."""
    words = list(words)
    if len(words) != _WORDS:
        raise ValueError(f"a bitmap holds exactly {_WORDS} words, got {len(words)}")
    if any(not 0 <= w <= _U64_MAX for w in words):
        raise ValueError("bitmap words must be unsigned 64-bit values")
    return sum(word << (_WORD_BITS * i) for i, word in enumerate(words))


def _int_to_words(value: int) -> list[int]:
    """Split a 512-bit integer into eight little-endian 64-bit words."""
    return [(value >> (_WORD_BITS * i)) & _U64_MAX for i in range(_WORDS)]


def max_tick_in_tickarray_bitmap(tick_spacing: int) -> int:
    """Number of ticks spanned by one 512-bit tick array bitmap."""
    return tick_spacing * TICK_ARRAY_SIZE * TICK_ARRAY_BITMAP_SIZE


def get_bitmap_tick_boundary(tick_array_start_index: int, tick_spacing: int) -> tuple[int, int]:
    """The [min, max) tick range of the bitmap holding the given tick array."""
    ticks_in_one_bitmap = max_tick_in_tickarray_bitmap(tick_spacing)
    magnitude = abs(tick_array_start_index)
    m = magnitude // ticks_in_one_bitmap
    if tick_array_start_index < 0 and magnitude % ticks_in_one_bitmap != 0:
        m += 1
    min_value = ticks_in_one_bitmap * m
    if tick_array_start_index < 0:
        return -min_value, -min_value + ticks_in_one_bitmap
    return min_value, min_value + ticks_in_one_bitmap


def check_extension_boundary(tick_index: int, tick_spacing: int) -> None:
    """Raise unless ``tick_index`` lies outside the pool's default bitmap range."""
    positive_boundary = max_tick_in_tickarray_bitmap(tick_spacing)
    negative_boundary = -positive_boundary
    if not MAX_TICK > positive_boundary:
        raise AmmError(ErrorCode.REQUIRE_GT_VIOLATED)
    if not negative_boundary > MIN_TICK:
        raise AmmError(ErrorCode.REQUIRE_GT_VIOLATED)
    if negative_boundary <= tick_index < positive_boundary:
        raise AmmError(ErrorCode.INVALID_TICK_ARRAY_BOUNDARY)


def bitmap_offset(tick_index: int, tick_spacing: int) -> int:
    """Which extension bitmap (0-based) holds the tick array starting at ``tick_index``."""
    if not is_valid_start_index(tick_index, tick_spacing):
        raise AmmError(ErrorCode.INVALID_TICK_INDEX)
    check_extension_boundary(tick_index, tick_spacing)
    ticks_in_one_bitmap = max_tick_in_tickarray_bitmap(tick_spacing)
    magnitude = abs(tick_index)
    offset = magnitude // ticks_in_one_bitmap - 1
    if tick_index < 0 and magnitude % ticks_in_one_bitmap == 0:
        offset -= 1
    return offset


def tick_array_offset_in_bitmap(tick_array_start_index: int, tick_spacing: int) -> int:
    """Bit position of the tick array inside its bitmap."""
    m = abs(tick_array_start_index) % max_tick_in_tickarray_bitmap(tick_spacing)
    offset = m // tick_count(tick_spacing)
    if tick_array_start_index < 0 and m != 0:
        offset = TICK_ARRAY_BITMAP_SIZE - offset
    return offset


def next_initialized_tick_array_in_bitmap(
    bitmap: Sequence[int],
    next_tick_array_start_index: int,
    tick_spacing: int,
    zero_for_one: bool,
) -> tuple[bool, int]:
    """Search one bitmap from the given tick array in swap direction.

    Returns ``(True, start_index)`` for the first initialized tick array found,
    the given one included; otherwise ``(False, boundary)`` where the boundary
    is where the search in the neighbouring bitmap continues from.
    """
    value = _words_to_int(bitmap)
    min_boundary, max_boundary = get_bitmap_tick_boundary(
        next_tick_array_start_index, tick_spacing
    )
    offset = tick_array_offset_in_bitmap(next_tick_array_start_index, tick_spacing)
    step = tick_count(tick_spacing)

    if zero_for_one:
        # Search from higher bits to lower bits.
        shifted = (value << (TICK_ARRAY_BITMAP_SIZE - 1 - offset)) & _BITMAP_MASK
        if not shifted:
            return False, min_boundary
        leading_zeros = TICK_ARRAY_BITMAP_SIZE - shifted.bit_length()
        return True, next_tick_array_start_index - leading_zeros * step

    # Search from lower bits to higher bits.
    shifted = value >> offset
    if not shifted:
        return False, max_boundary - step
    trailing_zeros = (shifted & -shifted).bit_length() - 1
    return True, next_tick_array_start_index + trailing_zeros * step