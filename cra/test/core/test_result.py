"""Tests for cra.core.result module."""

import pytest

from cra.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    """Tests for Ok type."""

    def test_create_ok(self) -> None:
        result = Ok(42)
        assert result.value == 42

    def test_ok_flags(self) -> None:
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_ok_unwrap_or(self) -> None:
        """Ok.unwrap_or() returns the value, ignoring default."""
        assert Ok(42).unwrap_or(0) == 42

    def test_ok_map(self) -> None:
        assert Ok(2).map(lambda x: x * 3) == Ok(6)

    def test_ok_is_frozen(self) -> None:
        result = Ok(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]


class TestErr:
    """Tests for Err type."""

    def test_err_flags(self) -> None:
        result = Err("boom")
        assert result.is_ok() is False
        assert result.is_err() is True

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("boom").unwrap()

    def test_err_unwrap_or(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_err_map_is_identity(self) -> None:
        err = Err("boom")
        assert err.map(lambda x: x) is err


class TestPatternMatching:
    """Result values are consumed with match statements."""

    def _describe(self, result: Result[int, str]) -> str:
        match result:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    def test_match_ok(self) -> None:
        assert self._describe(Ok(1)) == "ok 1"

    def test_match_err(self) -> None:
        assert self._describe(Err("x")) == "err x"

    def test_type_guards(self) -> None:
        assert is_ok(Ok(1)) is True
        assert is_err(Ok(1)) is False
        assert is_err(Err("x")) is True
