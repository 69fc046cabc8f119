"""Error codes raised by the pool state logic."""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Reasons a state operation can be rejected; each value is its message."""

    INVALID_TICK_INDEX = "Tick out of range"
    INVALID_TICK_ARRAY = "Invalid tick array account"
    INVALID_TICK_ARRAY_BOUNDARY = "Invalid tick array boundary"
    TICK_AND_SPACING_NOT_MATCH = "Tick spacing does not divide the tick index"
    TICK_LOWER_OVERFLOW = "Tick lower is below the minimum tick"
    TICK_UPPER_OVERFLOW = "Tick upper is above the maximum tick"
    TICK_INVALID_ORDER = "Tick lower must be less than tick upper"
    LIQUIDITY_SUB_VALUE_ERR = "Liquidity sub delta L must be smaller than before"
    LIQUIDITY_ADD_VALUE_ERR = "Liquidity add delta L must be greater or equal to before"
    INSUFFICIENT_LIQUIDITY_FOR_DIRECTION = "Insufficient liquidity for this direction"
    MISSING_TICK_ARRAY_BITMAP_EXTENSION_ACCOUNT = "Missing tick array bitmap extension account"
    FULL_REWARD_INFO = "All reward slots are already initialized"
    REWARD_TOKEN_ALREADY_IN_USE = "Reward token is already in use"
    EXCEPT_REWARD_MINT = "Reward mint is not allowed"
    NOT_APPROVED = "Not approved"
    ARITHMETIC_OVERFLOW = "Arithmetic overflow or underflow"
    REQUIRE_EQ_VIOLATED = "A required equality was violated"
    REQUIRE_GT_VIOLATED = "A required greater-than relation was violated"
    REQUIRE_GTE_VIOLATED = "A required greater-or-equal relation was violated"
    ACCOUNT_DISCRIMINATOR_MISMATCH = "Account discriminator did not match"
    ACCOUNT_DID_NOT_DESERIALIZE = "Account data could not be deserialized"
    ACCOUNT_DID_NOT_SERIALIZE = "Account data could not be serialized"


class AmmError(Exception):
    """Raised when an operation is rejected; carries the reason as ``code``."""

    def __init__(self, code: ErrorCode) -> None:
        if not isinstance(code, ErrorCode):
            raise TypeError(f"expected an ErrorCode, got {type(code).__name__}")
        self.code = code
        super().__init__(code.value)

    def __repr__(self) -> str:
        return f"AmmError({self.code.name})"