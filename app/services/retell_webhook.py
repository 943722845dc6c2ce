import json
import logging
from dataclasses import dataclass

from app.mappers.call_summary import Scalar, is_verified, normalize_call_summary
from app.mappers.verification import (
    NAME_MISMATCH_MIN_LENGTH,
    PHONE_MISMATCH_MIN_LENGTH,
    function_call_signals_failure,
    is_verification_failed,
)
from app.mappers.webhook_event import EventKind, classify_event, parse_webhook_event
from app.schemas.retell import WebhookEvent
from app.services.retell import RetellService

logger = logging.getLogger(__name__)

RECENT_TRANSCRIPT_CHARS = 200


@dataclass
class WebhookOutcome:
    call_id: str
    kind: EventKind
    hung_up: bool = False
    summary: dict[str, Scalar] | None = None


def expected_identity(event: WebhookEvent) -> tuple[str | None, str | None]:
    """Expected name/phone: trigger-time metadata first, then dynamic variables."""
    metadata = event.metadata or {}
    variables = event.dynamic_variables or {}
    name = (
        metadata.get("name")
        or variables.get("full_name")
        or variables.get("expected_name")
    )
    phone = (
        metadata.get("phone")
        or variables.get("phone_number")
        or variables.get("expected_phone")
    )
    return (str(name) if name else None, str(phone) if phone else None)


class RetellWebhookService:
    def __init__(
        self,
        retell: RetellService | None,
        debug: bool = False,
        name_min_length: int = NAME_MISMATCH_MIN_LENGTH,
        phone_min_length: int = PHONE_MISMATCH_MIN_LENGTH,
    ):
        self._retell = retell
        self._debug = debug
        self._name_min_length = name_min_length
        self._phone_min_length = phone_min_length

    async def handle(self, payload: dict) -> WebhookOutcome:
        if self._debug:
            logger.info("Raw webhook payload: %s", json.dumps(payload, default=str))

        event = parse_webhook_event(payload)
        kind = classify_event(event)
        logger.info(
            "Retell webhook received: event=%s call_id=%s status=%s kind=%s "
            "transcript=%s conversation_state=%s function_call=%s metadata=%s dynamic_vars=%s",
            event.event,
            event.call_id,
            event.call_status,
            kind,
            len(event.transcript or ""),
            event.conversation_state is not None,
            event.function_call is not None,
            event.metadata is not None,
            event.dynamic_variables is not None,
        )

        outcome = WebhookOutcome(call_id=event.call_id, kind=kind)
        if kind is EventKind.in_call:
            outcome.hung_up = await self.verify_in_call(event)
        elif kind is EventKind.completion:
            outcome.summary = self.complete(event)
        else:
            logger.info("Ignoring webhook event %s for call %s", event.event, event.call_id)
        return outcome

    def verification_failed(self, event: WebhookEvent) -> bool:
        if function_call_signals_failure(event.function_call):
            logger.info(
                "Function call %s signals failed verification",
                (event.function_call or {}).get("name"),
            )
            return True

        expected_name, expected_phone = expected_identity(event)
        return is_verification_failed(
            event.transcript,
            event.conversation_state,
            expected_name,
            expected_phone,
            name_min_length=self._name_min_length,
            phone_min_length=self._phone_min_length,
        )

    async def verify_in_call(self, event: WebhookEvent) -> bool:
        """Hang up when verification failed. Returns True only if the hangup succeeded."""
        if event.transcript:
            logger.info("Recent transcript: %s", event.transcript[-RECENT_TRANSCRIPT_CHARS:])

        if not self.verification_failed(event):
            return False

        expected_name, expected_phone = expected_identity(event)
        logger.info(
            "Verification failed for call %s (expected name=%s phone=%s), hanging up",
            event.call_id,
            expected_name,
            expected_phone,
        )
        return await self.hangup(event.call_id)

    async def hangup(self, call_id: str) -> bool:
        if self._retell is None:
            logger.error("Cannot hang up call %s: RETELL_API_KEY is not configured", call_id)
            return False
        try:
            await self._retell.end_call(call_id)
        except Exception:
            logger.exception("Error hanging up call %s", call_id)
            return False
        return True

    def complete(self, event: WebhookEvent) -> dict[str, Scalar]:
        if event.call_analysis:
            if is_verified(event.call_analysis):
                logger.info("Call %s verified successfully", event.call_id)
            else:
                logger.info("Call %s was not verified", event.call_id)

        summary = normalize_call_summary(event)
        logger.info(
            "Call %s complete: status=%s from=%s to=%s duration=%ss",
            event.call_id,
            summary["call_status"],
            summary["from_number"],
            summary["to_number"],
            summary["duration_seconds"],
        )
        return summary
