from __future__ import annotations

from ern.core.errors import ErrorCode


def test_error_code_values_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.ENV_ERROR) == 2
    assert int(ErrorCode.OPERATION_ERROR) == 3
    assert int(ErrorCode.PERSIST_ERROR) == 4


def test_error_code_str() -> None:
    assert str(ErrorCode.PERSIST_ERROR) == "persist error"


def test_is_success() -> None:
    assert ErrorCode.OK.is_success
    assert not ErrorCode.OPERATION_ERROR.is_success
