"""
Module 01 - Schemas & Canonicalization
File: tests/unit/test_canonical_json.py

Purpose: Unit tests for canonical JSON serialization.
These tests ensure persisted records serialize deterministically and that
amounts never pass through floats.
"""

import pytest

from core.schemas import (
    CanonicalizationException,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)
from core.schemas.distribution import Recipient


class TestDumpsCanonical:
    """Tests for canonical output."""

    def test_sorted_keys_no_whitespace(self):
        assert dumps_canonical({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_key_order_irrelevant(self):
        assert dumps_canonical({"x": 1, "y": 2}) == dumps_canonical({"y": 2, "x": 1})

    def test_bytes_as_bare_hex(self):
        assert dumps_canonical({"root": b"\x01\xff"}) == '{"root":"01ff"}'

    def test_none_fields_dropped(self):
        assert dumps_canonical({"a": None, "b": 1}) == '{"b":1}'

    def test_big_int_exact(self):
        assert dumps_canonical({"n": 2**255}) == '{"n":%d}' % 2**255

    def test_float_rejected(self):
        with pytest.raises(CanonicalizationException) as exc_info:
            dumps_canonical({"amount": 1.5})
        assert exc_info.value.details["path"] == "amount"

    def test_unknown_type_rejected(self):
        with pytest.raises(CanonicalizationException):
            canonicalize_value(object())

    def test_model_serialized_with_string_amount(self):
        recipient = Recipient(address="0x01", amount=42)
        out = dumps_canonical(recipient)
        assert '"amount":"42"' in out
        assert '"address":"0x' + "00" * 31 + '01"' in out


class TestLoadsCanonical:
    """Tests for canonical input."""

    def test_round_trip(self):
        data = {"leaves": ["00" * 32], "root": "11" * 32}
        assert loads_canonical(dumps_canonical(data)) == data

    def test_float_input_rejected(self):
        with pytest.raises(CanonicalizationException, match="Float"):
            loads_canonical('{"amount": 1.0}')

    def test_invalid_json(self):
        with pytest.raises(CanonicalizationException, match="Invalid JSON"):
            loads_canonical("{oops")


class TestCanonicalEquals:
    """Tests for canonical comparison."""

    def test_equal_regardless_of_order(self):
        assert canonical_equals({"a": 1, "b": 2}, {"b": 2, "a": 1})

    def test_not_equal(self):
        assert not canonical_equals({"a": 1}, {"a": 2})

    def test_uncanonicalizable_is_not_equal(self):
        assert not canonical_equals({"a": 1.0}, {"a": 1.0})
