import pytest

from cpamm.errors import (
    AccountError,
    AmmError,
    ExceededSlippage,
    InvalidInput,
    InvalidOwner,
    NotApproved,
)


def _all_default_errors():
    return [
        InvalidOwner(),
        InvalidInput(),
        NotApproved(),
        ExceededSlippage(),
        AccountError(),
    ]


def test_invalid_owner_has_default_message():
    error = InvalidOwner()
    assert isinstance(error, AmmError)
    assert str(error) == InvalidOwner.default_message


def test_invalid_input_has_default_message():
    error = InvalidInput()
    assert isinstance(error, AmmError)
    assert str(error) == InvalidInput.default_message


def test_not_approved_has_default_message():
    error = NotApproved()
    assert isinstance(error, AmmError)
    assert str(error) == NotApproved.default_message


def test_exceeded_slippage_has_default_message():
    error = ExceededSlippage()
    assert isinstance(error, AmmError)
    assert str(error) == ExceededSlippage.default_message


def test_account_error_has_default_message():
    error = AccountError()
    assert isinstance(error, AmmError)
    assert str(error) == AccountError.default_message


def test_custom_message_is_kept():
    assert str(InvalidInput("param 9")) == "param 9"


def test_raised_error_is_caught_as_amm_error():
    error = NotApproved("pool closed")
    assert str(error) == "pool closed"
    assert isinstance(error, AmmError)
    with pytest.raises(AmmError) as info:
        raise error
    assert info.value is error
    assert info.type is NotApproved


def test_default_messages_are_distinct():
    errors = _all_default_errors()
    messages = {str(error) for error in errors}
    assert len(messages) == len(errors)


def test_specific_error_is_not_another_kind():
    errors = _all_default_errors()
    classes = [type(error) for error in errors]
    for error in errors:
        matching = [cls for cls in classes if isinstance(error, cls)]
        assert matching == [type(error)]