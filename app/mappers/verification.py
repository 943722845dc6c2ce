import logging
import re
from enum import StrEnum

from app.mappers.phone import normalize_phone
from app.mappers.verification_rules import (
    FAILURE_FUNCTION_NAMES,
    FAILURE_PATTERNS,
    FAILURE_PHRASES,
    MISMATCH_ACKNOWLEDGMENT,
    NAME_ANSWERS,
    NAME_QUESTION,
    PHONE_ANSWERS,
    PHONE_QUESTION,
    RULES_VERSION,
)

logger = logging.getLogger(__name__)

NAME_MISMATCH_MIN_LENGTH = 2
PHONE_MISMATCH_MIN_LENGTH = 5

_SEPARATORS = re.compile(r"[\s\-()]")
_STATE_MISMATCH_FLAGS = ("name_mismatch", "phone_mismatch", "identity_mismatch")


class VerificationOutcome(StrEnum):
    failed = "failed"
    not_failed = "not_failed"
    indeterminate = "indeterminate"


def normalize_for_comparison(value: str) -> str:
    return _SEPARATORS.sub("", value.lower())


def extract_spoken_name(transcript: str) -> str | None:
    for pattern in NAME_ANSWERS:
        match = pattern.search(transcript)
        if match and match.group(1):
            return match.group(1).strip()
    return None


def extract_spoken_phone(transcript: str) -> str | None:
    for pattern in PHONE_ANSWERS:
        match = pattern.search(transcript)
        if match and match.group(1):
            digits = _SEPARATORS.sub("", match.group(1).strip())
            if digits:
                return digits
    return None


def _state_reports_failure(conversation_state: dict) -> bool:
    status = conversation_state.get("verification_status")
    if status is None:
        status = conversation_state.get("verified")
    if status is False or status == "failed":
        logger.info("Verification failed in conversation state")
        return True
    if any(conversation_state.get(flag) is True for flag in _STATE_MISMATCH_FLAGS):
        logger.info("Mismatch flagged in conversation state")
        return True
    return False


def _matched_phrase(lowered: str) -> str | None:
    for phrase in FAILURE_PHRASES:
        if phrase in lowered:
            return phrase
    return None


def _matched_pattern(transcript: str) -> re.Pattern[str] | None:
    for pattern in FAILURE_PATTERNS:
        if pattern.search(transcript):
            return pattern
    return None


def _answers_mismatch(
    transcript: str,
    expected_name: str | None,
    expected_phone: str | None,
    name_min_length: int,
    phone_min_length: int,
) -> bool:
    """Compare spoken answers to the expected identity.

    Names are compared with case and separators stripped. Phone answers are
    compared in E.164 form on both sides, so "313-555-1234" matches "+13135551234".
    """
    name_asked = bool(NAME_QUESTION.search(transcript))
    phone_asked = bool(PHONE_QUESTION.search(transcript))
    logger.debug("Verification questions asked: name=%s phone=%s", name_asked, phone_asked)

    if not (name_asked or phone_asked):
        return False

    if name_asked and expected_name:
        spoken = extract_spoken_name(transcript)
        if spoken:
            expected = normalize_for_comparison(expected_name)
            candidate = normalize_for_comparison(spoken)
            logger.debug("Name comparison: expected=%s candidate=%s", expected, candidate)
            if candidate != expected and len(candidate) > name_min_length:
                logger.info("Name mismatch detected")
                return True

    if phone_asked and expected_phone:
        spoken = extract_spoken_phone(transcript)
        if spoken:
            expected = normalize_phone(normalize_for_comparison(expected_phone))
            candidate = normalize_phone(spoken)
            logger.debug("Phone comparison: expected=%s candidate=%s", expected, candidate)
            if candidate != expected and len(spoken) > phone_min_length:
                logger.info("Phone mismatch detected")
                return True

    if MISMATCH_ACKNOWLEDGMENT.search(transcript):
        logger.info("Mismatch acknowledgment detected in transcript")
        return True

    return False


def evaluate_verification(
    transcript: str | None = None,
    conversation_state: dict | None = None,
    expected_name: str | None = None,
    expected_phone: str | None = None,
    name_min_length: int = NAME_MISMATCH_MIN_LENGTH,
    phone_min_length: int = PHONE_MISMATCH_MIN_LENGTH,
) -> VerificationOutcome:
    """Best-effort check of whether the called party failed identity verification.

    Structured conversation-state flags win outright. Otherwise the transcript
    is scanned for failure phrases, failure patterns, and, when the agent asked
    the caller to confirm their name or phone, a comparison of the spoken answer
    against the expected value. With no transcript the outcome is indeterminate.
    """
    if conversation_state and _state_reports_failure(conversation_state):
        return VerificationOutcome.failed

    if not transcript:
        logger.debug("No transcript available for verification check")
        return VerificationOutcome.indeterminate

    phrase = _matched_phrase(transcript.lower())
    if phrase:
        logger.info("Found failure phrase %r (rules %s)", phrase, RULES_VERSION)
        return VerificationOutcome.failed

    pattern = _matched_pattern(transcript)
    if pattern:
        logger.info("Found failure pattern %r (rules %s)", pattern.pattern, RULES_VERSION)
        return VerificationOutcome.failed

    if (expected_name or expected_phone) and _answers_mismatch(
        transcript, expected_name, expected_phone, name_min_length, phone_min_length
    ):
        return VerificationOutcome.failed

    return VerificationOutcome.not_failed


def is_verification_failed(
    transcript: str | None = None,
    conversation_state: dict | None = None,
    expected_name: str | None = None,
    expected_phone: str | None = None,
    name_min_length: int = NAME_MISMATCH_MIN_LENGTH,
    phone_min_length: int = PHONE_MISMATCH_MIN_LENGTH,
) -> bool:
    outcome = evaluate_verification(
        transcript,
        conversation_state,
        expected_name,
        expected_phone,
        name_min_length=name_min_length,
        phone_min_length=phone_min_length,
    )
    return outcome is VerificationOutcome.failed


def function_call_signals_failure(function_call: dict | None) -> bool:
    """An agent tool invocation that ends the call counts as a failed verification."""
    if not function_call:
        return False
    if function_call.get("name") in FAILURE_FUNCTION_NAMES:
        return True
    params = function_call.get("parameters")
    if not isinstance(params, dict):
        params = function_call.get("arguments")
    return isinstance(params, dict) and params.get("verification_status") is False
