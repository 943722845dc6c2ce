"""Turn loosely-shaped provider webhook bodies into a ``WebhookEvent``.

The provider has shipped several payload shapes over time (flat, nested under
``data`` or under ``call``), so every logical field is looked up through an
ordered chain of locations. The first location holding a non-null value wins.
"""

from enum import StrEnum
from typing import Any

from app.exceptions.custom import MalformedWebhookError
from app.schemas.retell import WebhookEvent

FieldPath = tuple[str, ...]

EVENT_CHAIN: list[FieldPath] = [
    ("payload", "event"),
    ("payload", "type"),
    ("payload", "status"),
    ("data", "event"),
    ("data", "type"),
    ("data", "status"),
]
CALL_ID_CHAIN: list[FieldPath] = [
    ("payload", "call_id"),
    ("payload", "callId"),
    ("data", "call_id"),
    ("data", "callId"),
    ("data", "call", "call_id"),
    ("data", "id"),
]
CALL_STATUS_CHAIN: list[FieldPath] = [
    ("data", "call_status"),
    ("payload", "call_status"),
    ("data", "call", "call_status"),
    ("data", "status"),
]
TRANSCRIPT_CHAIN: list[FieldPath] = [
    ("data", "transcript"),
    ("payload", "transcript"),
    ("data", "transcript_object"),
    ("data", "call", "transcript"),
]
ANALYSIS_CHAIN: list[FieldPath] = [
    ("data", "call_analysis"),
    ("payload", "call_analysis"),
    ("data", "analysis"),
    ("data", "call", "call_analysis"),
]
METADATA_CHAIN: list[FieldPath] = [
    ("data", "metadata"),
    ("payload", "metadata"),
    ("data", "call", "metadata"),
]
CONVERSATION_STATE_CHAIN: list[FieldPath] = [
    ("data", "conversation_state"),
    ("payload", "conversation_state"),
]
FUNCTION_CALL_CHAIN: list[FieldPath] = [
    ("data", "function_call"),
    ("payload", "function_call"),
    ("data", "tool_call"),
]
DYNAMIC_VARIABLES_CHAIN: list[FieldPath] = [
    ("data", "retell_llm_dynamic_variables"),
    ("payload", "retell_llm_dynamic_variables"),
    ("data", "dynamic_variables"),
    ("data", "call", "retell_llm_dynamic_variables"),
]
DURATION_CHAIN: list[FieldPath] = [
    ("data", "duration_ms"),
    ("payload", "duration_ms"),
    ("data", "call", "duration_ms"),
]
START_TIMESTAMP_CHAIN: list[FieldPath] = [
    ("data", "start_timestamp"),
    ("payload", "start_timestamp"),
]
END_TIMESTAMP_CHAIN: list[FieldPath] = [
    ("data", "end_timestamp"),
    ("payload", "end_timestamp"),
]
FROM_NUMBER_CHAIN: list[FieldPath] = [
    ("data", "from_number"),
    ("payload", "from_number"),
]
TO_NUMBER_CHAIN: list[FieldPath] = [
    ("data", "to_number"),
    ("payload", "to_number"),
]

IN_CALL_EVENTS = frozenset({
    "function_call",
    "response_audio",
    "conversation_state",
    "update",
    "transcription",
    "status_update",
})
COMPLETION_EVENTS = frozenset({"call_ended", "call_analysis", "ended"})
COMPLETED_STATUSES = frozenset({"ended", "completed"})
TERMINAL_STATUSES = COMPLETED_STATUSES | {"error", "not_connected", "failed"}


class EventKind(StrEnum):
    in_call = "in_call"
    completion = "completion"
    ignored = "ignored"


def resolve_data(payload: dict) -> dict:
    for key in ("data", "call"):
        candidate = payload.get(key)
        if isinstance(candidate, dict):
            return candidate
    return payload


def resolve_path(roots: dict[str, Any], path: FieldPath) -> Any:
    node: Any = roots.get(path[0])
    for key in path[1:]:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def resolve_first(roots: dict[str, Any], chain: list[FieldPath]) -> Any:
    for path in chain:
        value = resolve_path(roots, path)
        if value is not None:
            return value
    return None


def _as_dict(value: Any) -> dict | None:
    return value if isinstance(value, dict) else None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def transcript_to_text(value: Any) -> str | None:
    """Accept a plain transcript or a list of ``{role, content}`` utterances."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        lines: list[str] = []
        for entry in value:
            if isinstance(entry, dict):
                content = entry.get("content") or entry.get("message") or ""
                role = entry.get("role")
                lines.append(f"{role}: {content}" if role else str(content))
            else:
                lines.append(str(entry))
        return "\n".join(lines)
    return str(value)


def _duration_ms(roots: dict[str, Any]) -> float | None:
    duration = _as_number(resolve_first(roots, DURATION_CHAIN))
    if duration is not None:
        return duration
    start = _as_number(resolve_first(roots, START_TIMESTAMP_CHAIN))
    end = _as_number(resolve_first(roots, END_TIMESTAMP_CHAIN))
    if start is not None and end is not None and end >= start:
        return end - start
    return None


def parse_webhook_event(payload: dict) -> WebhookEvent:
    """Build a ``WebhookEvent`` or raise ``MalformedWebhookError`` without a call id."""
    if not isinstance(payload, dict):
        raise MalformedWebhookError()

    roots = {"payload": payload, "data": resolve_data(payload)}

    call_id = resolve_first(roots, CALL_ID_CHAIN)
    if call_id is None or str(call_id).strip() == "":
        raise MalformedWebhookError()

    return WebhookEvent(
        event=_as_text(resolve_first(roots, EVENT_CHAIN)),
        call_id=str(call_id),
        call_status=_as_text(resolve_first(roots, CALL_STATUS_CHAIN)),
        transcript=transcript_to_text(resolve_first(roots, TRANSCRIPT_CHAIN)),
        conversation_state=_as_dict(resolve_first(roots, CONVERSATION_STATE_CHAIN)),
        function_call=_as_dict(resolve_first(roots, FUNCTION_CALL_CHAIN)),
        metadata=_as_dict(resolve_first(roots, METADATA_CHAIN)),
        dynamic_variables=_as_dict(resolve_first(roots, DYNAMIC_VARIABLES_CHAIN)),
        call_analysis=_as_dict(resolve_first(roots, ANALYSIS_CHAIN)),
        duration_ms=_duration_ms(roots),
        from_number=_as_text(resolve_first(roots, FROM_NUMBER_CHAIN)),
        to_number=_as_text(resolve_first(roots, TO_NUMBER_CHAIN)),
    )


def classify_event(event: WebhookEvent) -> EventKind:
    name = (event.event or "").lower()
    status = (event.call_status or "").lower()

    if name in COMPLETION_EVENTS or status in COMPLETED_STATUSES:
        return EventKind.completion
    if name in IN_CALL_EVENTS:
        return EventKind.in_call
    # Upstream event names drift; a finished call still reports duration + status
    if event.duration_ms is not None and status in TERMINAL_STATUSES:
        return EventKind.completion
    return EventKind.ignored
