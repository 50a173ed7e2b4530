"""
Rule-based content threat detection.

The engine combines three signals over free text:

1. Per-category keyword phrases and regular expressions, plus look-alike
   domains found in URLs (weighted double).
2. A TF-IDF classifier trained on a small labelled corpus.
3. Severity and risk heuristics that turn the matches into a single risk level
   with recommendations.

Behavioural analysis of a conversation (timing, message rate, information
gathering and pressure tactics) is available separately.
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from truthshield.core.logging_config import get_logger
from truthshield.core.models.domain import SEVERITY_RANK, Severity, ThreatType
from truthshield.core.models.domain.analysis import (
    BehavioralAnalysis,
    ContentAnalysis,
    DetectedThreat,
    ThreatTypeResult,
)

from .patterns import (
    BASE_SEVERITY,
    INFORMATION_GATHERING_PHRASES,
    PRESSURE_PHRASES,
    RECOMMENDATIONS,
    THREAT_RULES,
    TRAINING_CORPUS,
    URL_HOST,
    ThreatRule,
)
from .tfidf import Classification, TfIdfClassifier

logger = get_logger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.7
DEFAULT_MAX_CONTENT_LENGTH = 5000
DOMAIN_MATCH_WEIGHT = 2
TFIDF_INDICATOR = "AI-pattern-detected"
RAPID_MESSAGE_WINDOW_SECONDS = 30


def sanitize_input(text: Any, max_length: int = DEFAULT_MAX_CONTENT_LENGTH) -> Any:
    """Trim, strip angle brackets and cap the length of user supplied text.

    Non-string values are returned unchanged.
    """
    if not isinstance(text, str):
        return text
    return text.strip().replace("<", "").replace(">", "")[:max_length]


class ThreatDetectionEngine:
    """Scores free text against the threat rule tables and the TF-IDF classifier."""

    def __init__(
        self,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        rules: Sequence[ThreatRule] = THREAT_RULES,
        training_corpus: Iterable[tuple] = TRAINING_CORPUS,
    ):
        self.confidence_threshold = confidence_threshold
        self.rules = tuple(rules)
        self.classifier = TfIdfClassifier((text, ThreatType(category).value) for text, category in training_corpus)
        logger.info(
            f"Threat detection engine initialized: {len(self.rules)} rule sets, "
            f"{len(self.classifier)} training documents, threshold {self.confidence_threshold}"
        )

    def analyze_content(self, content: str, context: Optional[Mapping[str, Any]] = None) -> ContentAnalysis:
        """Analyse ``content`` and return detected threats, overall confidence and risk.

        Args:
            content: Free text to analyse
            context: Optional caller context (source, timestamp, ...); kept for logging

        Returns:
            ContentAnalysis with threats, aggregated indicators and recommendations
        """
        threats: List[DetectedThreat] = []

        for rule in self.rules:
            result = self.detect_threat_type(content, rule)
            if result.detected:
                threats.append(
                    DetectedThreat(
                        type=rule.threat_type,
                        confidence=result.confidence,
                        indicators=result.indicators,
                        severity=self.calculate_severity(rule.threat_type, result.confidence),
                    )
                )

        classification = self.classify_with_tfidf(content)
        if classification.category and classification.confidence > self.confidence_threshold:
            threats.append(
                DetectedThreat(
                    type=ThreatType(classification.category),
                    confidence=classification.confidence,
                    indicators=[TFIDF_INDICATOR],
                    severity=self.calculate_severity(classification.category, classification.confidence),
                )
            )

        indicators: List[str] = []
        for threat in threats:
            for indicator in threat.indicators:
                if indicator not in indicators:
                    indicators.append(indicator)

        analysis = ContentAnalysis(
            threats=threats,
            confidence=self.calculate_overall_confidence(threats),
            risk_level=self.determine_risk_level(threats),
            indicators=indicators,
            recommendations=self.generate_recommendations(threats),
        )
        logger.debug(
            f"Analysed {len(content)} chars (source={(context or {}).get('source')}): "
            f"risk={analysis.risk_level.value}, threats={[t.type.value for t in threats]}"
        )
        return analysis

    def detect_threat_type(self, content: str, rule: ThreatRule) -> ThreatTypeResult:
        """Match one category's keywords, regexes and domains against ``content``."""
        lower_content = content.lower()
        match_count = 0
        indicators: List[str] = []

        for keyword in rule.keywords:
            if keyword.lower() in lower_content:
                match_count += 1
                indicators.append(f"keyword: {keyword}")

        for index, pattern in enumerate(rule.patterns, start=1):
            if pattern.search(content):
                match_count += 1
                indicators.append(f"pattern_{index}")

        if rule.domains:
            for host in URL_HOST.findall(content):
                if any(bad_domain in host.lower() for bad_domain in rule.domains):
                    match_count += DOMAIN_MATCH_WEIGHT
                    indicators.append(f"suspicious_domain: {host}")

        confidence = 0.0
        if rule.total_patterns > 0:
            confidence = min(1.0, match_count / rule.total_patterns)

        return ThreatTypeResult(
            detected=confidence > self.confidence_threshold,
            match_count=match_count,
            confidence=confidence,
            indicators=indicators,
        )

    def classify_with_tfidf(self, content: str) -> Classification:
        return self.classifier.classify(content)

    @staticmethod
    def calculate_severity(threat_type: ThreatType | str, confidence: float) -> Severity:
        """Base severity for a category, raised one step when confidence exceeds 0.9."""
        base = BASE_SEVERITY.get(ThreatType(threat_type).value, Severity.LOW)
        if confidence > 0.9:
            if base == Severity.MEDIUM:
                return Severity.HIGH
            if base == Severity.HIGH:
                return Severity.CRITICAL
        return base

    @staticmethod
    def calculate_overall_confidence(threats: Sequence[DetectedThreat]) -> float:
        if not threats:
            return 0.0
        return sum(threat.confidence for threat in threats) / len(threats)

    @staticmethod
    def determine_risk_level(threats: Sequence[DetectedThreat]) -> Severity:
        """Risk from the confidence-weighted sum of threat severities."""
        if not threats:
            return Severity.LOW

        weighted_score = sum(threat.confidence * SEVERITY_RANK[Severity(threat.severity)] for threat in threats)
        if weighted_score >= 3:
            return Severity.CRITICAL
        if weighted_score >= 2:
            return Severity.HIGH
        if weighted_score >= 1:
            return Severity.MEDIUM
        return Severity.LOW

    @staticmethod
    def generate_recommendations(threats: Sequence[DetectedThreat]) -> List[str]:
        recommendations: List[str] = []
        for threat in threats:
            for recommendation in RECOMMENDATIONS.get(ThreatType(threat.type).value, []):
                if recommendation not in recommendations:
                    recommendations.append(recommendation)
        return recommendations

    def analyze_behavioral_patterns(
        self,
        timestamp: Optional[datetime] = None,
        message_history: Optional[Sequence[Mapping[str, Any]]] = None,
        conversation: str = "",
        content: str = "",
    ) -> BehavioralAnalysis:
        """Flag risky conversation behaviour.

        Args:
            timestamp: When the latest message was sent; defaults to now
            message_history: Messages with a ``timestamp`` (datetime), oldest first
            conversation: Conversation transcript
            content: Latest message content

        Returns:
            BehavioralAnalysis with the risky patterns and an overall rating
        """
        patterns: Dict[str, bool] = {
            "unusual_timing": self.check_unusual_timing(timestamp or datetime.now()),
            "rapid_messages": self.check_rapid_messaging(message_history),
            "information_gathering": self.check_information_gathering(conversation),
            "pressure_tactics": self.check_pressure_tactics(content),
        }
        risks = [name for name, is_risky in patterns.items() if is_risky]

        if len(risks) > 2:
            overall = Severity.HIGH
        elif risks:
            overall = Severity.MEDIUM
        else:
            overall = Severity.LOW

        return BehavioralAnalysis(behavioral_risks=risks, overall_behavioral_risk=overall, patterns=patterns)

    @staticmethod
    def check_unusual_timing(timestamp: datetime) -> bool:
        # 23:00 to 05:59
        return timestamp.hour < 6 or timestamp.hour >= 23

    @staticmethod
    def check_rapid_messaging(message_history: Optional[Sequence[Mapping[str, Any]]]) -> bool:
        if not message_history or len(message_history) < 3:
            return False
        recent = message_history[-3:]
        elapsed = recent[2]["timestamp"] - recent[0]["timestamp"]
        return elapsed.total_seconds() < RAPID_MESSAGE_WINDOW_SECONDS

    @staticmethod
    def check_information_gathering(conversation: str) -> bool:
        lowered = (conversation or "").lower()
        return any(phrase in lowered for phrase in INFORMATION_GATHERING_PHRASES)

    @staticmethod
    def check_pressure_tactics(content: str) -> bool:
        lowered = (content or "").lower()
        return any(phrase in lowered for phrase in PRESSURE_PHRASES)


@lru_cache(maxsize=1)
def get_detection_engine() -> ThreatDetectionEngine:
    """Shared engine configured from application settings."""
    from truthshield.server.core.config import settings

    return ThreatDetectionEngine(confidence_threshold=settings.detection.confidence_threshold)
