import pytest

from clmmstate.bitmap import (
    TICK_ARRAY_BITMAP_SIZE,
    bitmap_offset,
    check_extension_boundary,
    get_bitmap_tick_boundary,
    max_tick_in_tickarray_bitmap,
    next_initialized_tick_array_in_bitmap,
    tick_array_offset_in_bitmap,
)
from clmmstate.errors import AmmError, ErrorCode
from clmmstate.tick_array import TICK_ARRAY_SIZE

U64_MAX = (1 << 64) - 1


def bitmap_with_bits(*bits):
    words = [0] * 8
    for bit in bits:
        words[bit // 64] |= 1 << (bit % 64)
    return words


def start(multiple, tick_spacing=1):
    return tick_spacing * TICK_ARRAY_SIZE * multiple


@pytest.mark.parametrize(
    "multiple, expected",
    [(512, 0), (513, 0), (1024, 1), (7393, 13), (-513, 0), (-1024, 0), (-1025, 1), (-7394, 13)],
)
def test_bitmap_offset(multiple, expected):
    assert bitmap_offset(start(multiple), 1) == expected


def test_bitmap_offset_beyond_max_tick_is_invalid():
    with pytest.raises(AmmError) as info:
        bitmap_offset(start(7394), 1)
    assert info.value.code is ErrorCode.INVALID_TICK_INDEX


def test_bitmap_offset_beyond_min_tick_is_invalid():
    with pytest.raises(AmmError) as info:
        bitmap_offset(start(-7395), 1)
    assert info.value.code is ErrorCode.INVALID_TICK_INDEX


@pytest.mark.parametrize("multiple", [-512, 511, 0])
def test_bitmap_offset_inside_default_range(multiple):
    with pytest.raises(AmmError) as info:
        bitmap_offset(start(multiple), 1)
    assert info.value.code is ErrorCode.INVALID_TICK_ARRAY_BOUNDARY


def test_extension_boundary_requires_room_beyond_default_bitmap():
    with pytest.raises(AmmError) as info:
        check_extension_boundary(0, 60)
    assert info.value.code is ErrorCode.REQUIRE_GT_VIOLATED


def test_extension_boundary_rejects_default_range():
    with pytest.raises(AmmError) as info:
        check_extension_boundary(-30720, 1)
    assert info.value.code is ErrorCode.INVALID_TICK_ARRAY_BOUNDARY


def test_max_tick_in_bitmap():
    assert max_tick_in_tickarray_bitmap(1) == 30720
    assert max_tick_in_tickarray_bitmap(10) == 307200


@pytest.mark.parametrize(
    "tick_spacing, multiple, offset, bit",
    [
        (1, 512, 0, 0),
        (1, 513, 0, 1),
        (1, 7393, 13, 225),
        (1, -513, 0, 511),
        (1, -514, 0, 510),
        (1, -1024, 0, 0),
        (1, -7394, 13, 286),
        (3, 512, 0, 0),
        (3, 2464, 3, 416),
        (3, -513, 0, 511),
        (3, -2465, 3, 95),
        (10, 512, 0, 0),
        (10, 739, 0, 227),
        (10, -513, 0, 511),
        (10, -740, 0, 284),
    ],
)
def test_bit_positions(tick_spacing, multiple, offset, bit):
    index = start(multiple, tick_spacing)
    assert bitmap_offset(index, tick_spacing) == offset
    assert tick_array_offset_in_bitmap(index, tick_spacing) == bit


def test_bitmap_tick_boundary():
    assert get_bitmap_tick_boundary(start(512), 1) == (30720, 61440)
    assert get_bitmap_tick_boundary(start(-513), 1) == (-61440, -30720)
    assert get_bitmap_tick_boundary(start(-512), 1) == (-30720, 0)


# Positive bitmap 0 with tick arrays 512 and 1000 initialized.
POSITIVE = bitmap_with_bits(0, 488)
# Negative bitmap 0 with tick arrays -513 and -1000 initialized.
NEGATIVE = bitmap_with_bits(511, 24)


def test_positive_search_upward():
    assert next_initialized_tick_array_in_bitmap(POSITIVE, start(512), 1, False) == (True, start(512))
    assert next_initialized_tick_array_in_bitmap(POSITIVE, start(513), 1, False) == (True, start(1000))


def test_positive_search_downward():
    assert next_initialized_tick_array_in_bitmap(POSITIVE, start(1000), 1, True) == (True, start(1000))
    assert next_initialized_tick_array_in_bitmap(POSITIVE, start(999), 1, True) == (True, start(512))


def test_negative_search_upward():
    assert next_initialized_tick_array_in_bitmap(NEGATIVE, start(-1000), 1, False) == (True, start(-1000))
    assert next_initialized_tick_array_in_bitmap(NEGATIVE, start(-999), 1, False) == (True, start(-513))


def test_negative_search_downward():
    assert next_initialized_tick_array_in_bitmap(NEGATIVE, start(-513), 1, True) == (True, start(-513))
    assert next_initialized_tick_array_in_bitmap(NEGATIVE, start(-514), 1, True) == (True, start(-1000))


def test_empty_bitmap_returns_boundaries():
    empty = [0] * 8
    assert next_initialized_tick_array_in_bitmap(empty, start(512), 1, True) == (False, 30720)
    assert next_initialized_tick_array_in_bitmap(empty, start(512), 1, False) == (False, 61440 - 60)


def test_not_found_past_last_bit():
    assert next_initialized_tick_array_in_bitmap(POSITIVE, start(1001), 1, False) == (False, 61440 - 60)


@pytest.mark.parametrize("tick_spacing", [1, 10, 60])
def test_all_initialized_bits_find_every_array(tick_spacing):
    ones = [U64_MAX] * 8
    step = tick_spacing * TICK_ARRAY_SIZE
    boundary = max_tick_in_tickarray_bitmap(tick_spacing)
    for k in range(1, TICK_ARRAY_BITMAP_SIZE, 37):
        upward = boundary + k * step
        assert next_initialized_tick_array_in_bitmap(ones, upward, tick_spacing, False) == (True, upward)
        downward = -boundary - k * step
        assert next_initialized_tick_array_in_bitmap(ones, downward, tick_spacing, True) == (True, downward)


def test_bitmap_must_have_eight_words():
    with pytest.raises(ValueError):
        next_initialized_tick_array_in_bitmap([0] * 7, start(512), 1, False)