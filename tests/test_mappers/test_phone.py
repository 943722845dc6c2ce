import pytest

from app.mappers.phone import is_valid_phone, normalize_phone


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3135551234", "+13135551234"),
        ("(313) 555-1234", "+13135551234"),
        ("313.555.1234", "+13135551234"),
        ("13135551234", "+13135551234"),
        ("+1 313 555 1234", "+13135551234"),
        ("44 20 7946 0958", "+442079460958"),
        ("+44 (20) 7946-0958", "+442079460958"),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


def test_normalize_phone_is_idempotent():
    for raw in ("3135551234", "44 20 7946 0958", "+1 (313) 555-1234"):
        once = normalize_phone(raw)
        assert normalize_phone(once) == once


def test_normalize_phone_custom_country_code():
    assert normalize_phone("6123456789", country_code="56") == "+566123456789"


def test_normalize_phone_empty():
    assert normalize_phone("") == ""
    assert normalize_phone(None) == ""


@pytest.mark.parametrize(
    "phone",
    ["3135551234", "+13135551234", "(313) 555-1234", "+44 20 7946 0958", "313-555-1234"],
)
def test_valid_phone(phone):
    assert is_valid_phone(phone) is True


@pytest.mark.parametrize("phone", ["abc", "555-CALL-NOW", "+", "12345678901234567890"])
def test_invalid_phone(phone):
    assert is_valid_phone(phone) is False
