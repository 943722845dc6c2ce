import pytest

from app.mappers.verification import (
    VerificationOutcome,
    evaluate_verification,
    extract_spoken_name,
    extract_spoken_phone,
    function_call_signals_failure,
    is_verification_failed,
)
from app.mappers.verification_rules import FAILURE_PHRASES, RULES_VERSION

CLEAN_TRANSCRIPT = (
    "Agent: Hello Jane, thank you for taking our call.\n"
    "User: Sure, happy to help.\n"
    "Agent: Great, you're all set. Have a nice day."
)

NAME_PROMPT = "Agent: Hi, may I please confirm your full name?\n"
PHONE_PROMPT = "Agent: Can you please confirm your phone number?\n"


def test_rules_are_versioned():
    assert RULES_VERSION
    assert len(FAILURE_PHRASES) >= 25


def test_clean_transcript_not_failed():
    assert evaluate_verification(CLEAN_TRANSCRIPT) is VerificationOutcome.not_failed
    assert is_verification_failed(CLEAN_TRANSCRIPT) is False


@pytest.mark.parametrize("phrase", FAILURE_PHRASES)
def test_every_failure_phrase_detected(phrase):
    transcript = f"Agent: Thanks for waiting. {phrase.upper()}. Goodbye."
    assert is_verification_failed(transcript) is True


def test_failure_pattern_without_phrase():
    transcript = "Agent: Sorry, but I can't verify you today."
    assert evaluate_verification(transcript) is VerificationOutcome.failed


def test_no_transcript_is_indeterminate():
    assert evaluate_verification(None) is VerificationOutcome.indeterminate
    assert evaluate_verification("") is VerificationOutcome.indeterminate
    assert is_verification_failed(None) is False


@pytest.mark.parametrize(
    "state",
    [
        {"verification_status": False},
        {"verification_status": "failed"},
        {"verified": False},
        {"name_mismatch": True},
        {"phone_mismatch": True},
        {"identity_mismatch": True},
    ],
)
def test_conversation_state_flags_fail(state):
    assert evaluate_verification(CLEAN_TRANSCRIPT, state) is VerificationOutcome.failed


def test_conversation_state_fails_without_transcript():
    assert is_verification_failed(None, {"name_mismatch": True}) is True


def test_conversation_state_passing_flags_fall_through():
    state = {"verification_status": "pending", "name_mismatch": False}
    assert evaluate_verification(CLEAN_TRANSCRIPT, state) is VerificationOutcome.not_failed


def test_spoken_name_mismatch_fails():
    transcript = NAME_PROMPT + "User: My name is John Smith."
    assert is_verification_failed(transcript, expected_name="Jane Doe") is True


def test_spoken_name_match_passes():
    transcript = NAME_PROMPT + "User: My name is Jane Doe."
    assert is_verification_failed(transcript, expected_name="jane  doe") is False


def test_short_name_capture_ignored():
    transcript = NAME_PROMPT + "User: My name is Al."
    assert is_verification_failed(transcript, expected_name="Jane Doe") is False
    assert is_verification_failed(transcript, expected_name="Jane Doe", name_min_length=1) is True


def test_name_answer_without_prompt_ignored():
    transcript = "User: My name is John Smith."
    assert is_verification_failed(transcript, expected_name="Jane Doe") is False


def test_spoken_phone_mismatch_fails():
    transcript = PHONE_PROMPT + "User: Sure, my number is 313 555 9999."
    assert is_verification_failed(transcript, expected_phone="+13135551234") is True


def test_spoken_phone_match_passes_after_e164_normalization():
    transcript = PHONE_PROMPT + "User: Sure, my number is 313-555-1234."
    assert is_verification_failed(transcript, expected_phone="+13135551234") is False


def test_mismatch_acknowledgment_fails():
    transcript = PHONE_PROMPT + "User: Um, I understand that the phone is different now."
    assert is_verification_failed(transcript, expected_phone="+13135551234") is True


def test_extract_spoken_name():
    assert extract_spoken_name("User: My name is Jane Doe.") == "Jane Doe"
    assert extract_spoken_name("User: Hello there.") is None


def test_extract_spoken_phone():
    assert extract_spoken_phone("User: my number is (313) 555-1234.") == "3135551234"
    assert extract_spoken_phone("User: no digits here") is None


@pytest.mark.parametrize("name", ["verification_failed", "hangup_call", "end_call"])
def test_function_call_names_fail(name):
    assert function_call_signals_failure({"name": name}) is True


def test_function_call_verification_status_false():
    call = {"name": "record_result", "parameters": {"verification_status": False}}
    assert function_call_signals_failure(call) is True


def test_function_call_other_names_pass():
    assert function_call_signals_failure({"name": "record_result", "parameters": {"verification_status": True}}) is False
    assert function_call_signals_failure(None) is False


def test_spoken_phone_with_country_code_matches_e164():
    transcript = PHONE_PROMPT + "User: Yes, my number is 1 313 555 1234."
    assert is_verification_failed(transcript, expected_phone="(313) 555-1234") is False
