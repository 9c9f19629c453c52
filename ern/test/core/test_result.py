"""Tests for ern.core.result module."""

import pytest

from ern.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    def test_ok_is_ok(self) -> None:
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42
        assert Ok(42).unwrap_or(0) == 42

    def test_ok_map(self) -> None:
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_ok_map_err_is_identity(self) -> None:
        assert Ok(42).map_err(lambda e: f"error: {e}") == Ok(42)

    def test_ok_repr(self) -> None:
        assert repr(Ok("1.0.0")) == "Ok('1.0.0')"

    def test_ok_frozen(self) -> None:
        result = Ok(42)
        with pytest.raises(AttributeError):
            result.value = 0  # type: ignore[misc]

    def test_ok_equality(self) -> None:
        assert Ok(42) == Ok(42)
        assert Ok(42) != Ok(0)
        assert Ok(42) != Err(42)


class TestErr:
    def test_err_is_err(self) -> None:
        result = Err("error")
        assert result.is_ok() is False
        assert result.is_err() is True

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("something went wrong").unwrap()

    def test_err_unwrap_or(self) -> None:
        result: Result[int, str] = Err("error")
        assert result.unwrap_or(42) == 42

    def test_err_map_is_identity(self) -> None:
        result: Result[int, str] = Err("error")
        assert result.map(lambda x: x * 2) == Err("error")

    def test_err_map_err(self) -> None:
        assert Err("boom").map_err(lambda e: f"wrapped: {e}") == Err("wrapped: boom")


class TestTypeGuards:
    def test_is_ok(self) -> None:
        assert is_ok(Ok(1)) is True
        assert is_ok(Err(1)) is False

    def test_is_err(self) -> None:
        assert is_err(Err(1)) is True
        assert is_err(Ok(1)) is False


def test_pattern_matching() -> None:
    def describe(result: Result[int, str]) -> str:
        match result:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    assert describe(Ok(1)) == "ok 1"
    assert describe(Err("x")) == "err x"
