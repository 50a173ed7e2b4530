"""
Threat rule tables for the content detection engine.

Each category carries keyword phrases, case-insensitive regular expressions
and, optionally, look-alike domains. The labelled training corpus seeds the
TF-IDF classifier.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Pattern, Tuple

from truthshield.core.models.domain import Severity, ThreatType


@dataclass(frozen=True)
class ThreatRule:
    """Matching rules for one threat category."""

    threat_type: ThreatType
    keywords: Tuple[str, ...]
    patterns: Tuple[Pattern[str], ...]
    domains: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def total_patterns(self) -> int:
        return len(self.keywords) + len(self.patterns)


def _compile(*expressions: str) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(expression, re.IGNORECASE) for expression in expressions)


THREAT_RULES: Tuple[ThreatRule, ...] = (
    ThreatRule(
        threat_type=ThreatType.PHISHING,
        keywords=(
            "verify your account",
            "password expiration",
            "suspended account",
            "urgent action required",
            "click here",
            "limited time offer",
            "free gift",
            "account verification",
            "security alert",
            "unauthorized login attempt",
            "update your information",
        ),
        patterns=_compile(
            r"verify.*account",
            r"password.*expir",
            r"suspended.*account",
            r"urgent.*action",
            r"click.*here",
            r"free.*gift",
        ),
        domains=("paypal-security.com", "apple-verify.net", "amazon-update.com"),
    ),
    ThreatRule(
        threat_type=ThreatType.MALWARE,
        keywords=(
            "virus detected",
            "system infected",
            "download now",
            "install update",
            "security patch",
            "anti-virus",
            "pc scan",
            "remove threats",
            "system cleaner",
        ),
        patterns=_compile(
            r"virus.*detected",
            r"system.*infected",
            r"download.*now",
            r"install.*update",
        ),
    ),
    ThreatRule(
        threat_type=ThreatType.SOCIAL_ENGINEERING,
        keywords=(
            "trust me",
            "emergency",
            "quick money",
            "guaranteed profit",
            "no risk",
            "limited spots",
            "exclusive offer",
            "once in a lifetime",
        ),
        patterns=_compile(
            r"trust.*me",
            r"emergency.*need",
            r"quick.*money",
            r"guaranteed.*profit",
        ),
    ),
    ThreatRule(
        threat_type=ThreatType.FINANCIAL_SCAM,
        keywords=(
            "investment opportunity",
            "bitcoin",
            "crypto",
            "double your money",
            "risk-free",
            "get rich quick",
            "stock tips",
            "forex trading",
            "binary options",
        ),
        patterns=_compile(
            r"investment.*opportunity",
            r"double.*money",
            r"risk-free",
            r"get.*rich.*quick",
        ),
    ),
    ThreatRule(
        threat_type=ThreatType.PREDATOR_BEHAVIOR,
        keywords=(
            "where do you live",
            "how old are you",
            "send picture",
            "meet in person",
            "keep this secret",
            "your parents",
            "alone tonight",
            "private chat",
        ),
        patterns=_compile(
            r"where.*live",
            r"how.*old",
            r"send.*picture",
            r"meet.*person",
            r"keep.*secret",
        ),
    ),
)

# (text, category) pairs
TRAINING_CORPUS: Tuple[Tuple[str, ThreatType], ...] = (
    ("verify your account now urgent action required", ThreatType.PHISHING),
    ("your password will expire soon click here", ThreatType.PHISHING),
    ("virus detected on your computer download antivirus", ThreatType.MALWARE),
    ("system infected install security update now", ThreatType.MALWARE),
    ("investment opportunity double your money fast", ThreatType.FINANCIAL_SCAM),
    ("bitcoin trading guaranteed profits no risk", ThreatType.FINANCIAL_SCAM),
    ("where do you live can we meet alone", ThreatType.PREDATOR_BEHAVIOR),
    ("how old are you send me your picture", ThreatType.PREDATOR_BEHAVIOR),
)

BASE_SEVERITY: Dict[str, Severity] = {
    ThreatType.PHISHING.value: Severity.HIGH,
    ThreatType.MALWARE.value: Severity.HIGH,
    ThreatType.FINANCIAL_SCAM.value: Severity.MEDIUM,
    ThreatType.SOCIAL_ENGINEERING.value: Severity.MEDIUM,
    ThreatType.PREDATOR_BEHAVIOR.value: Severity.CRITICAL,
}

RECOMMENDATIONS: Dict[str, List[str]] = {
    ThreatType.PHISHING.value: [
        "Do not click any links in this message",
        "Verify the sender through official channels",
        "Report this as phishing to the platform",
    ],
    ThreatType.MALWARE.value: [
        "Do not download any attachments",
        "Run a security scan on your device",
        "Keep your antivirus software updated",
    ],
    ThreatType.PREDATOR_BEHAVIOR.value: [
        "Do not share personal information",
        "Block and report this user immediately",
        "Inform a trusted adult about this interaction",
    ],
    ThreatType.FINANCIAL_SCAM.value: [
        "Be cautious of investment opportunities",
        "Research the company through official sources",
        "Never send money to unknown individuals",
    ],
    ThreatType.SOCIAL_ENGINEERING.value: [
        "Do not act on urgent requests without verifying them",
        "Contact the person through a channel you already trust",
        "Never share passwords or one-time codes",
    ],
}

INFORMATION_GATHERING_PHRASES: Tuple[str, ...] = (
    "where do you live",
    "what school",
    "how old are you",
    "your parents",
    "home alone",
    "your address",
)

PRESSURE_PHRASES: Tuple[str, ...] = (
    "right now",
    "immediately",
    "hurry",
    "last chance",
    "limited time",
    "now or never",
)

URL_HOST = re.compile(r"https?://([^/\s]+)", re.IGNORECASE)
