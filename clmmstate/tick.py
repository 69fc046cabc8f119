"""Tick state, reward bookkeeping and the growth-inside calculations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .errors import AmmError, ErrorCode

MIN_TICK = -443636
MAX_TICK = 443636
REWARD_NUM = 3

_U64_MAX = (1 << 64) - 1
_U128_MOD = 1 << 128
_U128_MAX = _U128_MOD - 1
_I128_MIN = -(1 << 127)
_I128_MAX = (1 << 127) - 1
_U32_MAX = (1 << 32) - 1
_TICK_PADDING_LEN = 13


def _checked_sub_u128(a: int, b: int) -> int:
    result = a - b
    if result < 0:
        raise AmmError(ErrorCode.ARITHMETIC_OVERFLOW)
    return result


def _wrapping_sub_u128(a: int, b: int) -> int:
    return (a - b) % _U128_MOD


def _checked_i128(value: int) -> int:
    if not _I128_MIN <= value <= _I128_MAX:
        raise AmmError(ErrorCode.ARITHMETIC_OVERFLOW)
    return value


def _add_delta(liquidity: int, delta: int) -> int:
    """Apply a signed liquidity delta to an unsigned liquidity amount."""
    if delta < 0:
        if liquidity < -delta:
            raise AmmError(ErrorCode.LIQUIDITY_SUB_VALUE_ERR)
        return liquidity + delta
    result = liquidity + delta
    if result > _U128_MAX:
        raise AmmError(ErrorCode.LIQUIDITY_ADD_VALUE_ERR)
    return result


@dataclass
class RewardInfo:
    """Per-pool state of one reward stream."""

    reward_state: int = 0
    open_time: int = 0
    end_time: int = 0
    last_update_time: int = 0
    emissions_per_second_x64: int = 0
    reward_total_emissioned: int = 0
    reward_claimed: int = 0
    token_mint: bytes = bytes(32)
    token_vault: bytes = bytes(32)
    authority: bytes = bytes(32)
    reward_growth_global_x64: int = 0

    def initialized(self) -> bool:
        """True once a reward mint has been set; this never reverts."""
        return bytes(self.token_mint) != bytes(32)


def _reward_growths(reward_infos: Sequence[RewardInfo]) -> list[int]:
    return [info.reward_growth_global_x64 for info in reward_infos[:REWARD_NUM]]


def is_out_of_boundary(tick: int) -> bool:
    """True if the tick lies outside [MIN_TICK, MAX_TICK]."""
    return tick < MIN_TICK or tick > MAX_TICK


@dataclass
class TickState:
    """Liquidity and growth accounting for one initialized tick."""

    tick: int = 0
    liquidity_net: int = 0
    liquidity_gross: int = 0
    fee_growth_outside_0_x64: int = 0
    fee_growth_outside_1_x64: int = 0
    reward_growths_outside_x64: list[int] = field(
        default_factory=lambda: [0] * REWARD_NUM
    )
    padding: list[int] = field(default_factory=lambda: [0] * _TICK_PADDING_LEN)

    LEN = 4 + 16 + 16 + 16 + 16 + 16 * REWARD_NUM + 16 + 16 + 8 + 8 + 4

    def initialize(self, tick: int, tick_spacing: int) -> None:
        """Set the tick index after checking range and spacing."""
        if is_out_of_boundary(tick):
            raise AmmError(ErrorCode.INVALID_TICK_INDEX)
        if tick % tick_spacing != 0:
            raise AmmError(ErrorCode.TICK_AND_SPACING_NOT_MATCH)
        self.tick = tick

    def update(
        self,
        tick_current: int,
        liquidity_delta: int,
        fee_growth_global_0_x64: int,
        fee_growth_global_1_x64: int,
        upper: bool,
        reward_infos: Sequence[RewardInfo],
    ) -> bool:
        """Apply a liquidity change; return True if initialization flipped."""
        gross_before = self.liquidity_gross
        gross_after = _add_delta(gross_before, liquidity_delta)
        flipped = (gross_after == 0) != (gross_before == 0)
        if gross_before == 0 and self.tick <= tick_current:
            # All growth before initialization is assumed to lie below the tick.
            self.fee_growth_outside_0_x64 = fee_growth_global_0_x64
            self.fee_growth_outside_1_x64 = fee_growth_global_1_x64
            self.reward_growths_outside_x64 = _reward_growths(reward_infos)
        self.liquidity_gross = gross_after
        if upper:
            self.liquidity_net = _checked_i128(self.liquidity_net - liquidity_delta)
        else:
            self.liquidity_net = _checked_i128(self.liquidity_net + liquidity_delta)
        return flipped

    def cross(
        self,
        fee_growth_global_0_x64: int,
        fee_growth_global_1_x64: int,
        reward_infos: Sequence[RewardInfo],
    ) -> int:
        """Flip the outside growths as price crosses; return liquidity_net."""
        self.fee_growth_outside_0_x64 = _checked_sub_u128(
            fee_growth_global_0_x64, self.fee_growth_outside_0_x64
        )
        self.fee_growth_outside_1_x64 = _checked_sub_u128(
            fee_growth_global_1_x64, self.fee_growth_outside_1_x64
        )
        for i, info in enumerate(reward_infos[:REWARD_NUM]):
            if not info.initialized():
                continue
            self.reward_growths_outside_x64[i] = _checked_sub_u128(
                info.reward_growth_global_x64, self.reward_growths_outside_x64[i]
            )
        return self.liquidity_net

    def clear(self) -> None:
        """Reset liquidity and growth fields, keeping the tick index."""
        self.liquidity_net = 0
        self.liquidity_gross = 0
        self.fee_growth_outside_0_x64 = 0
        self.fee_growth_outside_1_x64 = 0
        self.reward_growths_outside_x64 = [0] * REWARD_NUM

    def is_initialized(self) -> bool:
        """True if any position references this tick."""
        return self.liquidity_gross != 0

    def to_bytes(self) -> bytes:
        """Serialize to the packed little-endian layout."""
        try:
            if len(self.reward_growths_outside_x64) != REWARD_NUM:
                raise ValueError("wrong reward count")
            if len(self.padding) != _TICK_PADDING_LEN:
                raise ValueError("wrong padding length")
            parts = [
                self.tick.to_bytes(4, "little", signed=True),
                self.liquidity_net.to_bytes(16, "little", signed=True),
                self.liquidity_gross.to_bytes(16, "little"),
                self.fee_growth_outside_0_x64.to_bytes(16, "little"),
                self.fee_growth_outside_1_x64.to_bytes(16, "little"),
            ]
            parts.extend(g.to_bytes(16, "little") for g in self.reward_growths_outside_x64)
            parts.extend(p.to_bytes(4, "little") for p in self.padding)
        except (OverflowError, ValueError) as exc:
            raise AmmError(ErrorCode.ACCOUNT_DID_NOT_SERIALIZE) from exc
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "TickState":
        """Parse the packed layout written by ``to_bytes``."""
        data = bytes(data)
        if len(data) != cls.LEN:
            raise AmmError(ErrorCode.ACCOUNT_DID_NOT_DESERIALIZE)
        view = memoryview(data)

        def u(offset: int, size: int, signed: bool = False) -> int:
            return int.from_bytes(view[offset:offset + size], "little", signed=signed)

        rewards_at = 4 + 16 * 4
        padding_at = rewards_at + 16 * REWARD_NUM
        return cls(
            tick=u(0, 4, True),
            liquidity_net=u(4, 16, True),
            liquidity_gross=u(20, 16),
            fee_growth_outside_0_x64=u(36, 16),
            fee_growth_outside_1_x64=u(52, 16),
            reward_growths_outside_x64=[
                u(rewards_at + 16 * i, 16) for i in range(REWARD_NUM)
            ],
            padding=[u(padding_at + 4 * i, 4) for i in range(_TICK_PADDING_LEN)],
        )


def get_fee_growth_inside(
    tick_lower: TickState,
    tick_upper: TickState,
    tick_current: int,
    fee_growth_global_0_x64: int,
    fee_growth_global_1_x64: int,
) -> tuple[int, int]:
    """Fee growth inside [tick_lower, tick_upper) for both tokens."""
    if tick_current >= tick_lower.tick:
        below_0 = tick_lower.fee_growth_outside_0_x64
        below_1 = tick_lower.fee_growth_outside_1_x64
    else:
        below_0 = _checked_sub_u128(fee_growth_global_0_x64, tick_lower.fee_growth_outside_0_x64)
        below_1 = _checked_sub_u128(fee_growth_global_1_x64, tick_lower.fee_growth_outside_1_x64)

    if tick_current < tick_upper.tick:
        above_0 = tick_upper.fee_growth_outside_0_x64
        above_1 = tick_upper.fee_growth_outside_1_x64
    else:
        above_0 = _checked_sub_u128(fee_growth_global_0_x64, tick_upper.fee_growth_outside_0_x64)
        above_1 = _checked_sub_u128(fee_growth_global_1_x64, tick_upper.fee_growth_outside_1_x64)

    inside_0 = _wrapping_sub_u128(_wrapping_sub_u128(fee_growth_global_0_x64, below_0), above_0)
    inside_1 = _wrapping_sub_u128(_wrapping_sub_u128(fee_growth_global_1_x64, below_1), above_1)
    return inside_0, inside_1


def get_reward_growths_inside(
    tick_lower: TickState,
    tick_upper: TickState,
    tick_current_index: int,
    reward_infos: Sequence[RewardInfo],
) -> list[int]:
    """Reward growth inside the tick range for each reward slot."""
    inside = [0] * REWARD_NUM
    for i, info in enumerate(reward_infos[:REWARD_NUM]):
        if not info.initialized():
            continue
        global_x64 = info.reward_growth_global_x64
        if tick_current_index >= tick_lower.tick:
            below = tick_lower.reward_growths_outside_x64[i]
        else:
            below = _checked_sub_u128(global_x64, tick_lower.reward_growths_outside_x64[i])
        if tick_current_index < tick_upper.tick:
            above = tick_upper.reward_growths_outside_x64[i]
        else:
            above = _checked_sub_u128(global_x64, tick_upper.reward_growths_outside_x64[i])
        inside[i] = _wrapping_sub_u128(_wrapping_sub_u128(global_x64, below), above)
    return inside


def check_ticks_order(tick_lower_index: int, tick_upper_index: int) -> None:
    """Raise unless the lower tick is strictly below the upper tick."""
    if not tick_lower_index < tick_upper_index:
        raise AmmError(ErrorCode.TICK_INVALID_ORDER)