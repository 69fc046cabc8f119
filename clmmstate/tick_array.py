"""Fixed-size arrays of ticks and the index arithmetic that locates them."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Optional

from .errors import AmmError, ErrorCode
from .tick import MAX_TICK, MIN_TICK, TickState, is_out_of_boundary

TICK_ARRAY_SEED = "tick_array"
TICK_ARRAY_SIZE = 60

_DISCRIMINATOR = hashlib.sha256(b"account:TickArrayState").digest()[:8]
_PADDING_LEN = 107
_U8_MAX = 0xFF


def tick_count(tick_spacing: int) -> int:
    """Number of ticks covered by one tick array."""
    return TICK_ARRAY_SIZE * tick_spacing


def get_array_start_index(tick_index: int, tick_spacing: int) -> int:
    """Start index of the tick array that contains ``tick_index``."""
    ticks_in_array = tick_count(tick_spacing)
    return (tick_index // ticks_in_array) * ticks_in_array


def is_valid_start_index(tick_index: int, tick_spacing: int) -> bool:
    """True if ``tick_index`` can be the start of a tick array."""
    if is_out_of_boundary(tick_index):
        if tick_index > MAX_TICK:
            return False
        return tick_index == get_array_start_index(MIN_TICK, tick_spacing)
    return tick_index % tick_count(tick_spacing) == 0


def check_tick_array_start_index(
    tick_array_start_index: int, tick_index: int, tick_spacing: int
) -> None:
    """Raise unless ``tick_index`` is a usable tick inside the given array."""
    if tick_index < MIN_TICK:
        raise AmmError(ErrorCode.TICK_LOWER_OVERFLOW)
    if tick_index > MAX_TICK:
        raise AmmError(ErrorCode.TICK_UPPER_OVERFLOW)
    if tick_index % tick_spacing != 0:
        raise AmmError(ErrorCode.REQUIRE_EQ_VIOLATED)
    if tick_array_start_index != get_array_start_index(tick_index, tick_spacing):
        raise AmmError(ErrorCode.REQUIRE_EQ_VIOLATED)


def _default_ticks() -> list[TickState]:
    return [TickState() for _ in range(TICK_ARRAY_SIZE)]


@dataclass
class TickArrayState:
    """A run of ``TICK_ARRAY_SIZE`` consecutive spaced ticks of one pool."""

    pool_id: bytes = bytes(32)
    start_tick_index: int = 0
    ticks: list[TickState] = field(default_factory=_default_ticks)
    initialized_tick_count: int = 0
    recent_epoch: int = 0
    padding: bytes = bytes(_PADDING_LEN)

    LEN = 8 + 32 + 4 + TickState.LEN * TICK_ARRAY_SIZE + 1 + 115
    DISCRIMINATOR = _DISCRIMINATOR

    def __post_init__(self) -> None:
        self.pool_id = bytes(self.pool_id)
        if len(self.pool_id) != 32:
            raise ValueError(f"pool_id must be 32 bytes, got {len(self.pool_id)}")
        self.padding = bytes(self.padding)
        if len(self.padding) != _PADDING_LEN:
            raise ValueError(f"padding must be {_PADDING_LEN} bytes")
        if len(self.ticks) != TICK_ARRAY_SIZE:
            raise ValueError(f"a tick array holds exactly {TICK_ARRAY_SIZE} ticks")

    @classmethod
    def create(cls, start_index: int, tick_spacing: int, pool_id: bytes) -> "TickArrayState":
        """A fresh, empty tick array starting at ``start_index``."""
        return cls(pool_id=pool_id, start_tick_index=start_index)

    def update_initialized_tick_count(self, add: bool) -> None:
        """Count one tick more or one tick fewer as initialized."""
        count = self.initialized_tick_count + (1 if add else -1)
        if not 0 <= count <= _U8_MAX:
            raise AmmError(ErrorCode.ARITHMETIC_OVERFLOW)
        self.initialized_tick_count = count

    def tick_offset(self, tick_index: int, tick_spacing: int) -> int:
        """Position of ``tick_index`` in this array; raise if it lies elsewhere."""
        if get_array_start_index(tick_index, tick_spacing) != self.start_tick_index:
            raise AmmError(ErrorCode.INVALID_TICK_ARRAY)
        return (tick_index - self.start_tick_index) // tick_spacing

    def get_tick_state(self, tick_index: int, tick_spacing: int) -> TickState:
        """The stored tick for ``tick_index``, shared, so changes stick."""
        return self.ticks[self.tick_offset(tick_index, tick_spacing)]

    def update_tick_state(
        self, tick_index: int, tick_spacing: int, tick_state: TickState
    ) -> None:
        """Replace the tick stored for ``tick_index``."""
        self.ticks[self.tick_offset(tick_index, tick_spacing)] = tick_state

    def first_initialized_tick(self, zero_for_one: bool) -> TickState:
        """First initialized tick in swap direction; raise if there is none."""
        ordered = reversed(self.ticks) if zero_for_one else iter(self.ticks)
        for tick in ordered:
            if tick.is_initialized():
                return tick
        raise AmmError(ErrorCode.INVALID_TICK_ARRAY)

    def next_initialized_tick(
        self, current_tick_index: int, tick_spacing: int, zero_for_one: bool
    ) -> Optional[TickState]:
        """Next initialized tick from ``current_tick_index`` in swap direction.

        Moving down, ticks at or below the current index qualify; moving up,
        only ticks strictly above it. Returns None if the current index is in
        another array or nothing is found.
        """
        if get_array_start_index(current_tick_index, tick_spacing) != self.start_tick_index:
            return None
        offset = (current_tick_index - self.start_tick_index) // tick_spacing
        if zero_for_one:
            candidates = reversed(self.ticks[: offset + 1])
        else:
            candidates = iter(self.ticks[offset + 1:])
        return next((tick for tick in candidates if tick.is_initialized()), None)

    def next_tick_array_start_index(self, tick_spacing: int, zero_for_one: bool) -> int:
        """Start index of the neighbouring array in swap direction."""
        step = tick_count(tick_spacing)
        return self.start_tick_index - step if zero_for_one else self.start_tick_index + step

    def to_bytes(self) -> bytes:
        """Serialize the account, discriminator included."""
        try:
            parts = [
                _DISCRIMINATOR,
                self.pool_id,
                self.start_tick_index.to_bytes(4, "little", signed=True),
            ]
            parts.extend(tick.to_bytes() for tick in self.ticks)
            parts.append(self.initialized_tick_count.to_bytes(1, "little"))
            parts.append(self.recent_epoch.to_bytes(8, "little"))
            parts.append(self.padding)
        except OverflowError as exc:
            raise AmmError(ErrorCode.ACCOUNT_DID_NOT_SERIALIZE) from exc
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "TickArrayState":
        """Parse an account previously written by ``to_bytes``."""
        data = bytes(data)
        if len(data) < 8 or data[:8] != _DISCRIMINATOR:
            raise AmmError(ErrorCode.ACCOUNT_DISCRIMINATOR_MISMATCH)
        if len(data) < cls.LEN:
            raise AmmError(ErrorCode.ACCOUNT_DID_NOT_DESERIALIZE)
        pool_id = data[8:40]
        start = int.from_bytes(data[40:44], "little", signed=True)
        ticks_at = 44
        ticks = [
            TickState.from_bytes(data[ticks_at + i * TickState.LEN: ticks_at + (i + 1) * TickState.LEN])
            for i in range(TICK_ARRAY_SIZE)
        ]
        tail = ticks_at + TICK_ARRAY_SIZE * TickState.LEN
        return cls(
            pool_id=pool_id,
            start_tick_index=start,
            ticks=ticks,
            initialized_tick_count=data[tail],
            recent_epoch=int.from_bytes(data[tail + 1: tail + 9], "little"),
            padding=data[tail + 9: tail + 9 + _PADDING_LEN],
        )