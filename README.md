# clmmstate

Pure-Python models of the account state kept by a concentrated-liquidity market
maker (CLMM): ticks, tick arrays, the bitmaps that record which tick arrays are
initialized, and the pool-wide position over a tick range. Amounts are Python
integers; where a fixed-width operation would overflow or underflow, an
`AmmError` is raised, and the fee- and reward-growth-inside calculations wrap
at 128 bits.

## Modules

- `clmmstate.errors`: `ErrorCode`, an enumeration of failure reasons whose
  values are their messages, and `AmmError`, the exception raised with one of
  them in its `code` attribute.
- `clmmstate.tick`: `TickState` (with `initialize`, `update`, `cross`, `clear`,
  `is_initialized`, `to_bytes`, `from_bytes`) and `RewardInfo` (with
  `initialized`), plus `get_fee_growth_inside`, `get_reward_growths_inside`,
  `check_ticks_order` and `is_out_of_boundary`. The tick range is
  `MIN_TICK = -443636` to `MAX_TICK = 443636`; there are `REWARD_NUM = 3`
  reward slots.
- `clmmstate.tick_array`: `TickArrayState`, a run of 60 ticks
  (`create`, `tick_offset`, `get_tick_state`, `update_tick_state`,
  `update_initialized_tick_count`, `first_initialized_tick`,
  `next_initialized_tick`, `next_tick_array_start_index`, `to_bytes`,
  `from_bytes`), and the helpers `tick_count`, `get_array_start_index`,
  `is_valid_start_index` and `check_tick_array_start_index`.
- `clmmstate.bitmap`: bit arithmetic for 512-bit tick-array bitmaps held as
  eight 64-bit words: `max_tick_in_tickarray_bitmap`,
  `get_bitmap_tick_boundary`, `check_extension_boundary`, `bitmap_offset`,
  `tick_array_offset_in_bitmap` and `next_initialized_tick_array_in_bitmap`.
- `clmmstate.bitmap_extension`: `TickArrayBitmapExtension`, fourteen positive
  and fourteen negative bitmaps for tick arrays outside the default bitmap
  range (`initialize`, `get_bitmap`, `check_tick_array_is_initialized`,
  `flip_tick_array_bit`, `next_initialized_tick_array_from_one_bitmap`,
  `to_bytes`, `from_bytes`).
- `clmmstate.protocol_position`: `ProtocolPositionState`, whose `update`
  accrues the fees owed to a tick range and applies a liquidity change, and
  `update_reward_growths_inside`.
- `clmmstate.support_mint`: `SupportMintAssociated`, a record of a supported
  mint and its bump (`initialize`, `to_bytes`, `from_bytes`).

`TickState`, `TickArrayState`, `TickArrayBitmapExtension` and
`SupportMintAssociated` serialise to and from packed little-endian byte
layouts. The account layouts begin with an 8-byte discriminator, and
`from_bytes` raises `AmmError` if it does not match or the data is too short.

## Installation

```
pip install .
```

## Example

```python
from clmmstate.tick_array import TickArrayState, get_array_start_index

start = get_array_start_index(-1002, 30)      # -1800
array = TickArrayState.create(start, 30, bytes(32))

tick = array.get_tick_state(-1200, 30)
tick.initialize(-1200, 30)
tick.liquidity_gross = 1
print(array.first_initialized_tick(zero_for_one=True).tick)       # -1200
print(array.next_tick_array_start_index(30, zero_for_one=False))  # 0
```

```python
from clmmstate.bitmap_extension import TickArrayBitmapExtension

extension = TickArrayBitmapExtension()
extension.flip_tick_array_bit(60 * 512, 1)
print(extension.check_tick_array_is_initialized(60 * 512, 1))  # (True, 30720)
```

Invalid input raises `clmmstate.errors.AmmError`:

```python
from clmmstate.errors import AmmError, ErrorCode
from clmmstate.tick import check_ticks_order

try:
    check_ticks_order(10, 10)
except AmmError as exc:
    assert exc.code is ErrorCode.TICK_INVALID_ORDER
```

## What it does not do

The package models individual accounts and their arithmetic only. It has no
pool state, no swap or liquidity-provision flow, no reward emission schedule,
no account address derivation and no storage or network access; callers hold
the objects and pass the pool's figures (current tick, global fee and reward
growths) in themselves.

## Running the tests

```
pip install .[test]
pytest
```