"""Tests for the Result type transport outcomes are carried in."""

from __future__ import annotations

import pytest

from restmcp.foundation.errors import Err, Ok


def test_ok_accessors() -> None:
    r = Ok(42)
    assert r.is_ok() and not r.is_err()
    assert r.unwrap() == 42
    with pytest.raises(RuntimeError, match="unwrap_err"):
        r.unwrap_err()


def test_err_accessors() -> None:
    r = Err("boom")
    assert r.is_err() and not r.is_ok()
    assert r.unwrap_err() == "boom"
    with pytest.raises(RuntimeError, match="unwrap\\(\\) on Err: boom"):
        r.unwrap()


def test_equality_and_repr() -> None:
    assert Ok(1) == Ok(1)
    assert Ok(1) != Err(1)
    assert repr(Ok("x")) == "Ok('x')"
    assert repr(Err(3)) == "Err(3)"
