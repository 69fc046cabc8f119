"""Account recording that a token mint is supported by the program."""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field

from .errors import AmmError, ErrorCode

SUPPORT_MINT_SEED = "support_mint"

_DISCRIMINATOR = hashlib.sha256(b"account:SupportMintAssociated").digest()[:8]
_BODY = struct.Struct("<B32s8Q")
_U64_MAX = (1 << 64) - 1


def _check_key(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")
    return value


@dataclass
class SupportMintAssociated:
    """Holds a supported mint address and the bump of its derived account."""

    bump: int = 0
    mint: bytes = bytes(32)
    padding: list[int] = field(default_factory=lambda: [0] * 8)

    LEN = 8 + 1 + 32 + 64
    DISCRIMINATOR = _DISCRIMINATOR

    def __post_init__(self) -> None:
        self.mint = _check_key(self.mint, "mint")
        if not 0 <= self.bump <= 0xFF:
            raise ValueError("bump must fit in one byte")
        if len(self.padding) != 8 or any(not 0 <= p <= _U64_MAX for p in self.padding):
            raise ValueError("padding must be eight unsigned 64-bit values")

    def initialize(self, bump: int, mint: bytes) -> None:
        """Record the bump and the supported mint."""
        if not 0 <= bump <= 0xFF:
            raise ValueError("bump must fit in one byte")
        self.mint = _check_key(mint, "mint")
        self.bump = bump

    def to_bytes(self) -> bytes:
        """Serialize the account, discriminator included."""
        try:
            body = _BODY.pack(self.bump, self.mint, *self.padding)
        except struct.error as exc:
            raise AmmError(ErrorCode.ACCOUNT_DID_NOT_SERIALIZE) from exc
        return _DISCRIMINATOR + body

    @classmethod
    def from_bytes(cls, data: bytes) -> "SupportMintAssociated":
        """Parse an account previously written by ``to_bytes``."""
        data = bytes(data)
        if len(data) < 8 or data[:8] != _DISCRIMINATOR:
            raise AmmError(ErrorCode.ACCOUNT_DISCRIMINATOR_MISMATCH)
        if len(data) < cls.LEN:
            raise AmmError(ErrorCode.ACCOUNT_DID_NOT_DESERIALIZE)
        bump, mint, *padding = _BODY.unpack_from(data, 8)
        return cls(bump=bump, mint=mint, padding=list(padding))