import pytest

from clmmstate.errors import AmmError, ErrorCode


def test_error_carries_code():
    err = AmmError(ErrorCode.INVALID_TICK_INDEX)
    assert err.code is ErrorCode.INVALID_TICK_INDEX


def test_error_message_is_code_value():
    err = AmmError(ErrorCode.TICK_INVALID_ORDER)
    assert str(err) == ErrorCode.TICK_INVALID_ORDER.value


def test_error_rejects_non_code():
    with pytest.raises(TypeError):
        AmmError("InvalidTickIndex")


def test_codes_have_distinct_messages():
    messages = {str(AmmError(code)) for code in ErrorCode}
    assert len(messages) == len(ErrorCode)


@pytest.mark.parametrize(
    "name",
    [
        "INVALID_TICK_INDEX",
        "INVALID_TICK_ARRAY",
        "INVALID_TICK_ARRAY_BOUNDARY",
        "TICK_AND_SPACING_NOT_MATCH",
        "TICK_LOWER_OVERFLOW",
        "TICK_UPPER_OVERFLOW",
        "TICK_INVALID_ORDER",
    ],
)
def test_tick_codes_exist(name):
    err = AmmError(ErrorCode[name])
    assert repr(err) == f"AmmError({name})"
    assert err.code.name == name


def test_repr_names_code():
    assert repr(AmmError(ErrorCode.NOT_APPROVED)) == "AmmError(NOT_APPROVED)"