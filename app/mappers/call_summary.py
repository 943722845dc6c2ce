import json
import math
from datetime import datetime, timezone
from typing import Any

from app.schemas.retell import WebhookEvent

Scalar = str | int | float | bool

VERIFIED = "verified"
NOT_VERIFIED = "not_verified"

# First location present wins
EXTRACTION_KEYS = (
    "custom_data",
    "custom_call_data",
    "post_call_data",
    "data_extraction",
    "extracted_data",
    "custom_analysis_data",
)

# Spreadsheet column -> key in the extracted data
CUSTOM_FIELDS: dict[str, str] = {
    "primary_clinical_role": "primary_clinical_role",
    "years_of_experience": "years_of_experience",
    "licensed_in_state": "currently_licensed_in_state",
    "work_type": "work_type",
    "available_shifts": "available_shifts",
    "open_to_multiple_locations": "open_to_multiple_locations",
    "orientation_ready": "can_complete_orientations",
    "reliable_transportation": "reliable_transportation",
    "research_interest": "research_interest",
    "diagnosed_conditions": "diagnosed_or_cared_for_conditions",
    "comfortable_participating": "comfortable_participating",
    "contact_consent": "contact_consent",
}


def duration_seconds(duration_ms: float | None) -> int:
    """Milliseconds to whole seconds, rounding half up (45500 → 46)."""
    if not duration_ms or duration_ms < 0:
        return 0
    return int(math.floor(duration_ms / 1000 + 0.5))


def _item_text(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return "" if value is None else str(value)


def flatten_value(value: Any, key: str, out: dict[str, Scalar]) -> None:
    """Write ``value`` into ``out`` as one or more scalar columns.

    Dicts recurse with ``key_subkey`` names, lists are joined with ", ",
    and None becomes an empty string.
    """
    if isinstance(value, dict):
        if not value:
            out[key] = ""
        for sub_key, sub_value in value.items():
            flatten_value(sub_value, f"{key}_{sub_key}", out)
    elif isinstance(value, list):
        out[key] = ", ".join(_item_text(v) for v in value)
    elif value is None:
        out[key] = ""
    elif isinstance(value, (str, int, float, bool)):
        out[key] = value
    else:
        out[key] = str(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return _item_text(value)


def extracted_data(analysis: dict) -> dict:
    for key in EXTRACTION_KEYS:
        candidate = analysis.get(key)
        if isinstance(candidate, dict):
            return candidate
    return {}


def is_verified(analysis: dict) -> bool:
    return (
        analysis.get("verified") is True
        or analysis.get("verification_status") is True
        or analysis.get("verification_status") == VERIFIED
    )


def normalize_call_summary(
    event: WebhookEvent, now: datetime | None = None
) -> dict[str, Scalar]:
    """Flatten a finished call into the fixed spreadsheet row schema."""
    analysis = event.call_analysis or {}
    metadata = event.metadata or {}
    variables = event.dynamic_variables or {}
    custom = extracted_data(analysis)
    verified = is_verified(analysis)
    timestamp = (now or datetime.now(timezone.utc)).isoformat()

    row: dict[str, Scalar] = {
        "call_id": event.call_id,
        "call_status": event.call_status or "unknown",
        "name": _text(metadata.get("name")),
        "phone": _text(metadata.get("phone")),
        "expected_name": _text(variables.get("expected_name") or metadata.get("name")),
        "expected_phone": _text(variables.get("expected_phone") or metadata.get("phone")),
        "from_number": event.from_number or "",
        "to_number": event.to_number or "",
        "duration_seconds": duration_seconds(event.duration_ms),
        "transcript": event.transcript or "",
        "call_summary": _text(analysis.get("call_summary")),
        "call_successful": analysis.get("call_successful") is True,
        "verified": verified,
        "verification_status": VERIFIED if verified else NOT_VERIFIED,
    }

    for column, source_key in CUSTOM_FIELDS.items():
        flatten_value(custom.get(source_key), column, row)

    named = set(CUSTOM_FIELDS.values())
    for key, value in custom.items():
        if key not in named:
            flatten_value(value, f"custom_{key}", row)

    row["timestamp"] = timestamp
    return row
