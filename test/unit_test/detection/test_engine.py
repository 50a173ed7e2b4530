"""Unit tests for the content threat detection engine."""

import re
from datetime import datetime, timedelta

import pytest

from truthshield.core.models.domain import Severity, ThreatType
from truthshield.core.models.domain.analysis import DetectedThreat
from truthshield.detection import THREAT_RULES, ThreatDetectionEngine, ThreatRule, sanitize_input
from truthshield.detection.engine import TFIDF_INDICATOR


@pytest.fixture
def engine() -> ThreatDetectionEngine:
    return ThreatDetectionEngine(confidence_threshold=0.7)


def _rule(threat_type: ThreatType) -> ThreatRule:
    return next(rule for rule in THREAT_RULES if rule.threat_type == threat_type)


def _threat(threat_type: ThreatType, confidence: float, severity: Severity) -> DetectedThreat:
    return DetectedThreat(type=threat_type, confidence=confidence, severity=severity)


class TestSanitizeInput:
    def test_trims_and_strips_angle_brackets(self):
        assert sanitize_input("  <script>alert(1)</script> ") == "scriptalert(1)/script"

    def test_caps_length(self):
        assert len(sanitize_input("a" * 6000)) == 5000
        assert len(sanitize_input("a" * 50, max_length=10)) == 10

    def test_non_strings_are_returned_unchanged(self):
        assert sanitize_input(42) == 42
        assert sanitize_input(None) is None


class TestDetectThreatType:
    def test_keywords_and_patterns_each_count_once(self, engine):
        result = engine.detect_threat_type("Please verify your account today", _rule(ThreatType.PHISHING))
        assert result.match_count == 2
        assert "keyword: verify your account" in result.indicators
        assert "pattern_1" in result.indicators
        assert result.confidence == pytest.approx(2 / 17)
        assert result.detected is False

    def test_suspicious_domain_counts_double(self, engine):
        result = engine.detect_threat_type("Login at https://paypal-security.com/login", _rule(ThreatType.PHISHING))
        assert result.match_count == 2
        assert result.indicators == ["suspicious_domain: paypal-security.com"]

    def test_detected_above_threshold_and_confidence_is_capped(self):
        rule = ThreatRule(
            threat_type=ThreatType.MALWARE,
            keywords=("virus detected",),
            patterns=(re.compile(r"virus", re.IGNORECASE),),
            domains=("evil.example",),
        )
        engine = ThreatDetectionEngine(confidence_threshold=0.7, rules=[rule])
        result = engine.detect_threat_type("Virus detected! get help at http://evil.example/fix", rule)
        assert result.match_count == 4
        assert result.confidence == 1.0
        assert result.detected is True

    def test_at_threshold_is_not_detected(self):
        rule = ThreatRule(
            threat_type=ThreatType.MALWARE,
            keywords=("alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta", "iota", "kappa"),
            patterns=(),
        )
        engine = ThreatDetectionEngine(confidence_threshold=0.7, rules=[rule], training_corpus=())
        result = engine.detect_threat_type("alpha beta gamma delta epsilon zeta eta", rule)
        assert result.confidence == pytest.approx(0.7)
        assert result.detected is False

    def test_no_matches(self, engine):
        result = engine.detect_threat_type("See you at lunch", _rule(ThreatType.MALWARE))
        assert result.match_count == 0
        assert result.confidence == 0.0
        assert result.indicators == []


class TestSeverityAndRisk:
    @pytest.mark.parametrize(
        "threat_type, confidence, expected",
        [
            (ThreatType.PHISHING, 0.8, Severity.HIGH),
            (ThreatType.PHISHING, 0.95, Severity.CRITICAL),
            (ThreatType.MALWARE, 0.5, Severity.HIGH),
            (ThreatType.FINANCIAL_SCAM, 0.8, Severity.MEDIUM),
            (ThreatType.SOCIAL_ENGINEERING, 0.91, Severity.HIGH),
            (ThreatType.PREDATOR_BEHAVIOR, 0.95, Severity.CRITICAL),
            (ThreatType.DATA_BREACH, 0.95, Severity.LOW),
        ],
    )
    def test_calculate_severity(self, threat_type, confidence, expected):
        assert ThreatDetectionEngine.calculate_severity(threat_type, confidence) == expected

    def test_calculate_severity_accepts_string_types(self):
        assert ThreatDetectionEngine.calculate_severity("malware", 0.95) == Severity.CRITICAL

    def test_overall_confidence_is_the_mean(self):
        threats = [
            _threat(ThreatType.PHISHING, 0.8, Severity.HIGH),
            _threat(ThreatType.MALWARE, 0.6, Severity.HIGH),
        ]
        assert ThreatDetectionEngine.calculate_overall_confidence(threats) == pytest.approx(0.7)
        assert ThreatDetectionEngine.calculate_overall_confidence([]) == 0.0

    @pytest.mark.parametrize(
        "confidence, severity, expected",
        [
            (1.0, Severity.CRITICAL, Severity.CRITICAL),
            (0.75, Severity.CRITICAL, Severity.CRITICAL),
            (0.8, Severity.HIGH, Severity.HIGH),
            (0.6, Severity.MEDIUM, Severity.MEDIUM),
            (0.9, Severity.LOW, Severity.LOW),
        ],
    )
    def test_determine_risk_level(self, confidence, severity, expected):
        threats = [_threat(ThreatType.PHISHING, confidence, severity)]
        assert ThreatDetectionEngine.determine_risk_level(threats) == expected

    def test_risk_level_sums_across_threats(self):
        threats = [
            _threat(ThreatType.FINANCIAL_SCAM, 0.8, Severity.MEDIUM),
            _threat(ThreatType.SOCIAL_ENGINEERING, 0.8, Severity.MEDIUM),
        ]
        # 0.8 * 2 + 0.8 * 2 = 3.2
        assert ThreatDetectionEngine.determine_risk_level(threats) == Severity.CRITICAL

    def test_no_threats_is_low_risk(self):
        assert ThreatDetectionEngine.determine_risk_level([]) == Severity.LOW

    def test_recommendations_are_deduplicated_in_order(self):
        threats = [
            _threat(ThreatType.PHISHING, 0.8, Severity.HIGH),
            _threat(ThreatType.PHISHING, 0.9, Severity.HIGH),
            _threat(ThreatType.MALWARE, 0.8, Severity.HIGH),
        ]
        recommendations = ThreatDetectionEngine.generate_recommendations(threats)
        assert recommendations[0] == "Do not click any links in this message"
        assert len(recommendations) == 6
        assert len(set(recommendations)) == 6


class TestAnalyzeContent:
    def test_predator_message_is_critical(self, engine):
        analysis = engine.analyze_content("where do you live can we meet alone")
        assert [threat.type for threat in analysis.threats] == [ThreatType.PREDATOR_BEHAVIOR]
        assert analysis.threats[0].indicators == [TFIDF_INDICATOR]
        assert analysis.confidence == pytest.approx(1.0)
        assert analysis.risk_level == Severity.CRITICAL
        assert analysis.is_high_risk
        assert "Block and report this user immediately" in analysis.recommendations

    def test_phishing_message_is_flagged_by_the_classifier(self, engine):
        analysis = engine.analyze_content("verify your account urgent action required")
        assert analysis.threats[0].type == ThreatType.PHISHING
        assert analysis.threats[0].severity == Severity.CRITICAL
        assert analysis.indicators == [TFIDF_INDICATOR]

    def test_harmless_message_is_low_risk(self, engine):
        analysis = engine.analyze_content("Shall we grab lunch tomorrow at noon?")
        assert analysis.threats == []
        assert analysis.confidence == 0.0
        assert analysis.risk_level == Severity.LOW
        assert analysis.recommendations == []
        assert not analysis.is_high_risk

    def test_rule_detection_contributes_indicators(self):
        rule = ThreatRule(
            threat_type=ThreatType.MALWARE,
            keywords=("virus detected",),
            patterns=(re.compile(r"virus", re.IGNORECASE),),
        )
        engine = ThreatDetectionEngine(confidence_threshold=0.7, rules=[rule], training_corpus=())
        analysis = engine.analyze_content("Virus detected on your PC")
        assert len(analysis.threats) == 1
        assert analysis.indicators == ["keyword: virus detected", "pattern_1"]
        # high base severity raised by full confidence
        assert analysis.threats[0].severity == Severity.CRITICAL


class TestBehavioralAnalysis:
    @pytest.mark.parametrize("hour, expected", [(2, True), (5, True), (6, False), (12, False), (22, False), (23, True)])
    def test_unusual_timing(self, hour, expected):
        assert ThreatDetectionEngine.check_unusual_timing(datetime(2024, 1, 1, hour, 30)) is expected

    def test_rapid_messaging_needs_three_messages_within_thirty_seconds(self):
        start = datetime(2024, 1, 1, 12, 0, 0)
        rapid = [{"timestamp": start + timedelta(seconds=offset)} for offset in (0, 10, 20)]
        slow = [{"timestamp": start + timedelta(seconds=offset)} for offset in (0, 20, 40)]
        assert ThreatDetectionEngine.check_rapid_messaging(rapid) is True
        assert ThreatDetectionEngine.check_rapid_messaging(slow) is False
        assert ThreatDetectionEngine.check_rapid_messaging(rapid[:2]) is False
        assert ThreatDetectionEngine.check_rapid_messaging(None) is False

    def test_only_the_last_three_messages_count(self):
        start = datetime(2024, 1, 1, 12, 0, 0)
        history = [{"timestamp": start + timedelta(seconds=offset)} for offset in (0, 100, 105, 110)]
        assert ThreatDetectionEngine.check_rapid_messaging(history) is True

    def test_information_gathering_and_pressure(self):
        assert ThreatDetectionEngine.check_information_gathering("So, what school do you go to?")
        assert not ThreatDetectionEngine.check_information_gathering("Nice weather today")
        assert ThreatDetectionEngine.check_pressure_tactics("You must decide RIGHT NOW")
        assert not ThreatDetectionEngine.check_pressure_tactics("Take your time")

    def test_overall_rating(self, engine):
        start = datetime(2024, 1, 1, 23, 30, 0)
        history = [{"timestamp": start + timedelta(seconds=offset)} for offset in (0, 5, 10)]
        analysis = engine.analyze_behavioral_patterns(
            timestamp=start,
            message_history=history,
            conversation="how old are you?",
            content="hurry, reply immediately",
        )
        assert analysis.behavioral_risks == [
            "unusual_timing",
            "rapid_messages",
            "information_gathering",
            "pressure_tactics",
        ]
        assert analysis.overall_behavioral_risk == Severity.HIGH

        single = engine.analyze_behavioral_patterns(timestamp=datetime(2024, 1, 1, 12, 0), content="last chance!")
        assert single.behavioral_risks == ["pressure_tactics"]
        assert single.overall_behavioral_risk == Severity.MEDIUM

        calm = engine.analyze_behavioral_patterns(timestamp=datetime(2024, 1, 1, 12, 0))
        assert calm.behavioral_risks == []
        assert calm.overall_behavioral_risk == Severity.LOW
