"""Tests for allocation/phone.py."""
import pytest

from allocation.exceptions import ValidationError
from allocation.phone import clean_phone, normalize_phone, phones_equivalent


@pytest.mark.parametrize("raw, expected", [
    ("(11) 98765-4321", "11987654321"),
    ("+55 11 98765-4321", "11987654321"),
    ("5511987654321", "11987654321"),
    ("98765-4321", "987654321"),
    ("+55 (98) 98765-4321", "8987654321"),
    ("", ""),
    (None, ""),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize("raw", [
    "(11) 98765-4321", "+55 11 98765-4321", "98765-4321", "+55 (98) 98765-4321", "abc",
])
def test_normalize_phone_stable_for_common_formats(raw):
    once = normalize_phone(raw)
    assert normalize_phone(once) == once


def test_area_code_nine_changes_on_renormalization():
    # Ten digits starting with 9 lose the leading digit again
    once = normalize_phone("(99) 98765-4321")
    assert once == "9987654321"
    assert normalize_phone(once) == "987654321"


def test_short_numbers_keep_leading_nine():
    # Nine digits or fewer: the mobile prefix is not stripped
    assert normalize_phone("987654321") == "987654321"


def test_phones_equivalent_across_formats():
    assert phones_equivalent("(11) 98765-4321", "+55 11 98765-4321")
    assert not phones_equivalent("(11) 98765-4321", "(21) 98765-4321")


def test_clean_phone_rejects_input_without_digits():
    with pytest.raises(ValidationError):
        clean_phone("n/a")
    assert clean_phone("(11) 98765-4321") == "11987654321"
