"""
Content threat detection.

Keyword, regex and look-alike domain rules per threat category, a small
TF-IDF classifier, and behavioural analysis of conversations.
"""

from .engine import ThreatDetectionEngine, get_detection_engine, sanitize_input
from .patterns import THREAT_RULES, ThreatRule
from .tfidf import TfIdfClassifier

__all__ = [
    "THREAT_RULES",
    "TfIdfClassifier",
    "ThreatDetectionEngine",
    "ThreatRule",
    "get_detection_engine",
    "sanitize_input",
]
