"""Account state models for a concentrated-liquidity market maker: ticks, tick arrays, tick-array bitmaps, protocol positions and supported mints."""

__version__ = "0.1.0"

__all__ = [
    "bitmap",
    "bitmap_extension",
    "errors",
    "protocol_position",
    "support_mint",
    "tick",
    "tick_array",
]