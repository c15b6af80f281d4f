"""
Keyword based intent detection.

Rules are checked in order and the first hit wins, so the narrower phrases
("my booking", "pending approval") come before the generic "book".
"""

import re
from typing import List, Tuple

from hallbook.services.chatbot.types import Intent

INTENT_RULES: List[Tuple[Intent, Tuple[str, ...]]] = [
    (Intent.MY_BOOKINGS, (r"\bmy bookings?\b",)),
    (Intent.HOD_PENDING_BOOKINGS, (r"\bpending approvals?\b", r"\bpending bookings?\b")),
    (Intent.AVAILABILITY, (r"\bfree\b", r"\bavailab")),
    (Intent.MAINTENANCE, (r"not working", r"\bbroken\b", r"\bissues?\b", r"\brepair", r"\binstall")),
    (Intent.BOOKING, (r"\bbook", r"\breserve")),
    (Intent.STATUS, (r"\bstatus\b", r"\bupdate")),
]


def detect_intent(message: str) -> Intent:
    msg = (message or "").lower()
    for intent, patterns in INTENT_RULES:
        if any(re.search(p, msg) for p in patterns):
            return intent
    return Intent.UNKNOWN
