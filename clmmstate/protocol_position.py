"""Liquidity and fee accounting of a pool-wide position over a tick range."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .errors import AmmError, ErrorCode
from .tick import MAX_TICK, MIN_TICK, REWARD_NUM, _add_delta

POSITION_SEED = "position"

_Q64 = 1 << 64
_U64_MAX = (1 << 64) - 1
_U128_MAX = (1 << 128) - 1
_I128_MIN = -(1 << 127)
_I128_MAX = (1 << 127) - 1


def _fees_owed(growth_now: int, growth_last: int, liquidity: int) -> int:
    """Fees earned since the last update, zero if they do not fit in 64 bits."""
    delta = max(growth_now - growth_last, 0)
    owed = delta * liquidity // _Q64
    if owed > _U128_MAX:
        raise AmmError(ErrorCode.ARITHMETIC_OVERFLOW)
    return owed if owed < _U64_MAX else 0


@dataclass
class ProtocolPositionState:
    """State of all liquidity the pool holds over one tick range."""

    bump: int = 0
    pool_id: bytes = bytes(32)
    tick_lower_index: int = 0
    tick_upper_index: int = 0
    liquidity: int = 0
    fee_growth_inside_0_last_x64: int = 0
    fee_growth_inside_1_last_x64: int = 0
    token_fees_owed_0: int = 0
    token_fees_owed_1: int = 0
    reward_growth_inside: list[int] = field(default_factory=lambda: [0] * REWARD_NUM)
    recent_epoch: int = 0
    padding: list[int] = field(default_factory=lambda: [0] * 7)

    LEN = 8 + 1 + 32 + 4 + 4 + 16 + 16 + 16 + 8 + 8 + 16 * REWARD_NUM + 64

    def update(
        self,
        tick_lower_index: int,
        tick_upper_index: int,
        liquidity_delta: int,
        fee_growth_inside_0_x64: int,
        fee_growth_inside_1_x64: int,
        reward_growths_inside: Sequence[int],
    ) -> None:
        """Accrue fees earned so far and apply a liquidity change."""
        if self.liquidity == 0 and liquidity_delta == 0:
            return
        if not MIN_TICK <= tick_lower_index <= MAX_TICK:
            raise AmmError(ErrorCode.TICK_LOWER_OVERFLOW)
        if not MIN_TICK <= tick_upper_index <= MAX_TICK:
            raise AmmError(ErrorCode.TICK_UPPER_OVERFLOW)
        if not _I128_MIN <= liquidity_delta <= _I128_MAX:
            raise AmmError(ErrorCode.ARITHMETIC_OVERFLOW)

        owed_0 = _fees_owed(fee_growth_inside_0_x64, self.fee_growth_inside_0_last_x64, self.liquidity)
        owed_1 = _fees_owed(fee_growth_inside_1_x64, self.fee_growth_inside_1_last_x64, self.liquidity)

        new_liquidity = _add_delta(self.liquidity, liquidity_delta)
        new_owed_0 = self.token_fees_owed_0 + owed_0
        new_owed_1 = self.token_fees_owed_1 + owed_1
        if (owed_0 or owed_1) and (new_owed_0 > _U64_MAX or new_owed_1 > _U64_MAX):
            raise AmmError(ErrorCode.ARITHMETIC_OVERFLOW)

        self.liquidity = new_liquidity
        self.fee_growth_inside_0_last_x64 = fee_growth_inside_0_x64
        self.fee_growth_inside_1_last_x64 = fee_growth_inside_1_x64
        self.tick_lower_index = tick_lower_index
        self.tick_upper_index = tick_upper_index
        if owed_0 or owed_1:
            self.token_fees_owed_0 = new_owed_0
            self.token_fees_owed_1 = new_owed_1
        self.update_reward_growths_inside(reward_growths_inside)

    def update_reward_growths_inside(self, reward_growths_inside: Sequence[int]) -> None:
        """Record the reward growths; rewards owed are worked out per user."""
        growths = list(reward_growths_inside)
        if len(growths) != REWARD_NUM:
            raise ValueError(f"expected {REWARD_NUM} reward growths, got {len(growths)}")
        self.reward_growth_inside = growths