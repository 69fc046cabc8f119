import pytest

from clmmstate.errors import AmmError, ErrorCode
from clmmstate.support_mint import SupportMintAssociated

MINT = bytes(range(1, 33))


def test_default_is_zeroed():
    account = SupportMintAssociated()
    assert account.bump == 0
    assert account.mint == bytes(32)
    assert account.padding == [0] * 8


def test_initialize_sets_fields():
    account = SupportMintAssociated()
    account.initialize(254, MINT)
    assert account.bump == 254
    assert account.mint == MINT


def test_serialized_length_matches_len():
    account = SupportMintAssociated()
    account.initialize(7, MINT)
    assert len(account.to_bytes()) == SupportMintAssociated.LEN == 8 + 1 + 32 + 64


def test_layout_positions():
    account = SupportMintAssociated()
    account.initialize(9, MINT)
    data = account.to_bytes()
    assert data[:8] == SupportMintAssociated.DISCRIMINATOR
    assert data[8] == 9
    assert data[9:41] == MINT
    assert data[41:] == bytes(64)


def test_round_trip():
    account = SupportMintAssociated(bump=3, mint=MINT, padding=[2**64 - 1 - i for i in range(8)])
    restored = SupportMintAssociated.from_bytes(account.to_bytes())
    assert restored == account


def test_wrong_discriminator_rejected():
    data = bytearray(SupportMintAssociated(bump=1, mint=MINT).to_bytes())
    data[0] ^= 0xFF
    with pytest.raises(AmmError) as info:
        SupportMintAssociated.from_bytes(bytes(data))
    assert info.value.code is ErrorCode.ACCOUNT_DISCRIMINATOR_MISMATCH


def test_truncated_data_rejected():
    data = SupportMintAssociated(bump=1, mint=MINT).to_bytes()[:-1]
    with pytest.raises(AmmError) as info:
        SupportMintAssociated.from_bytes(data)
    assert info.value.code is ErrorCode.ACCOUNT_DID_NOT_DESERIALIZE


def test_bad_mint_length_rejected():
    account = SupportMintAssociated()
    with pytest.raises(ValueError):
        account.initialize(1, b"short")
    assert account.mint == bytes(32)


def test_bump_out_of_range_rejected():
    account = SupportMintAssociated()
    with pytest.raises(ValueError):
        account.initialize(256, MINT)
    assert account.bump == 0