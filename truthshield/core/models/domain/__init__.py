"""Domain enumerations used across the TruthShield service."""

from .enums import (
    SEVERITY_RANK,
    ActionTaken,
    AgeGroup,
    ChildRelationship,
    Difficulty,
    GameType,
    Persona,
    ProtectionLevel,
    Severity,
    ThreatSource,
    ThreatType,
)

__all__ = [
    "SEVERITY_RANK",
    "ActionTaken",
    "AgeGroup",
    "ChildRelationship",
    "Difficulty",
    "GameType",
    "Persona",
    "ProtectionLevel",
    "Severity",
    "ThreatSource",
    "ThreatType",
]
