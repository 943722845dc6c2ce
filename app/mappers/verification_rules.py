"""Phrase and pattern data used by the transcript verification check.

Bump ``RULES_VERSION`` whenever an entry is added, removed or reworded so
that logged outcomes can be traced back to the rule set that produced them.
"""

import re

RULES_VERSION = "2024.1"

FAILURE_PHRASES: tuple[str, ...] = (
    "verification failed",
    "not verified",
    "wrong name",
    "wrong phone",
    "incorrect name",
    "incorrect phone",
    "name doesn't match",
    "phone doesn't match",
    "verification unsuccessful",
    "cannot verify",
    "unable to verify",
    "doesn't match",
    "not matching",
    "sorry, that's not correct",
    "that's incorrect",
    "i cannot proceed",
    "i need to end this call",
    "i'll have to hang up",
    "ending the call",
    "that's not the name",
    "that's not the phone number",
    "the name provided doesn't match",
    "the phone number doesn't match",
    "mismatch",
    "identity confirmation failed",
    "that doesn't match",
    "that is not correct",
    "that's not right",
    "i'm sorry, that's not",
)

FAILURE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"sorry.*(can't|cannot).*verify",
        r"unable.*to.*verify",
        r"verification.*(failed|unsuccessful)",
        r"(name|phone).*(doesn't|does not|do not).*match",
        r"(name|phone).*provided.*(doesn't|does not|do not).*match",
        r"identity.*(confirmation|verification).*(failed|unsuccessful)",
        r"(that's|that is).*not.*(correct|right|the).*(name|phone)",
        r"(that|this).*(doesn't|does not|do not).*match",
        r"(that|this).*is.*not.*(correct|right)",
    )
)

NAME_QUESTION = re.compile(
    r"(?:may i|can you|please).*(?:confirm|verify).*your.*(?:name|full name)",
    re.IGNORECASE,
)
PHONE_QUESTION = re.compile(
    r"(?:can you|please).*(?:confirm|verify).*phone.*number",
    re.IGNORECASE,
)

NAME_ANSWERS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?:my name is|i'm|it's|this is|i am|call me)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?:confirm|verify).*your.*(?:name|full name).*?([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)",
        re.IGNORECASE,
    ),
)
PHONE_ANSWERS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:it's|it is|the number is|my number is|phone is)\s*([+\d\s\-()]+)", re.IGNORECASE),
    re.compile(r"(?:confirm|verify).*phone.*number.*?([+\d\s\-()]+)", re.IGNORECASE),
)

MISMATCH_ACKNOWLEDGMENT = re.compile(
    r"(?:acknowledge|noted|i see|i understand).*(?:that|the).*(?:name|phone)"
    r".*(?:doesn't|does not|is different|is not|not match)",
    re.IGNORECASE,
)

FAILURE_FUNCTION_NAMES = frozenset({"verification_failed", "hangup_call", "end_call"})
