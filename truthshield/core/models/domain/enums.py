"""
Domain enumerations shared by entities, I/O schemas and the detection engine.
"""

from __future__ import annotations

from enum import Enum


class AgeGroup(str, Enum):
    """Audience bracket derived from a user's age."""

    CHILD = "child"  # 6-12
    TEEN = "teen"  # 13-17
    ADULT = "adult"  # 18-64
    SENIOR = "senior"  # 65+


class Persona(str, Enum):
    """How a user primarily uses the platform."""

    INDIVIDUAL = "individual"
    PARENT = "parent"
    ENTERPRISE = "enterprise"
    CHILD = "child"


class GameType(str, Enum):
    """Available training games."""

    SCAM_SPOTTER = "scam_spotter"
    THREAT_HUNTER = "threat_hunter"
    FIREWALL_COMMANDER = "firewall_commander"
    PRIVACY_GUARDIAN = "privacy_guardian"
    CRYPTO_DEFENDER = "crypto_defender"
    SOCIAL_SENTINEL = "social_sentinel"


class Difficulty(str, Enum):
    """Game difficulty, ordered from easiest to hardest."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class ThreatType(str, Enum):
    """Category of a reported or detected threat."""

    PHISHING = "phishing"
    MALWARE = "malware"
    SOCIAL_ENGINEERING = "social_engineering"
    PRIVACY_VIOLATION = "privacy_violation"
    FINANCIAL_SCAM = "financial_scam"
    PREDATOR_BEHAVIOR = "predator_behavior"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    DATA_BREACH = "data_breach"


class Severity(str, Enum):
    """Threat severity / risk level, ordered from lowest to highest."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]


SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class ThreatSource(str, Enum):
    """Where a threat was encountered."""

    EMAIL = "email"
    WEBSITE = "website"
    SOCIAL_MEDIA = "social_media"
    MESSAGE = "message"
    APP = "app"
    OTHER = "other"


class ActionTaken(str, Enum):
    """What was done about a threat."""

    BLOCKED = "blocked"
    WARNED = "warned"
    REPORTED = "reported"
    IGNORED = "ignored"


class ChildRelationship(str, Enum):
    """Relationship of a child member to the family parent."""

    SON = "son"
    DAUGHTER = "daughter"
    WARD = "ward"
    OTHER = "other"


class ProtectionLevel(str, Enum):
    """Overall family protection setting."""

    MINIMAL = "minimal"
    MODERATE = "moderate"
    STRICT = "strict"
    MAXIMUM = "maximum"
