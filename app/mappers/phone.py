import re

DEFAULT_COUNTRY_CODE = "1"

_PHONE_FORMAT = re.compile(
    r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,9}$"
)
_SEPARATORS = re.compile(r"[\s\-().]")


def is_valid_phone(phone: str) -> bool:
    """Loose international format check; whitespace is ignored."""
    return bool(_PHONE_FORMAT.match(re.sub(r"\s", "", phone)))


def normalize_phone(phone: str | None, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Normalize a phone number to E.164.

    "(313) 555-1234" → "+13135551234"
    "44 20 7946 0958" → "+442079460958"
    "+1 313 555 1234" → "+13135551234"
    """
    if not phone:
        return ""
    cleaned = _SEPARATORS.sub("", phone)
    if cleaned.startswith("+"):
        return cleaned
    if len(cleaned) == 10:
        return f"+{country_code}{cleaned}"
    return f"+{cleaned}"
