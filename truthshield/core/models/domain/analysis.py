"""
Result models produced by the content detection engine.
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from .enums import Severity, ThreatType


class ThreatTypeResult(BaseModel):
    """Outcome of matching one category's rules against a text."""

    detected: bool = False
    match_count: int = 0
    confidence: float = 0.0
    indicators: List[str] = Field(default_factory=list)


class DetectedThreat(BaseModel):
    type: ThreatType
    confidence: float
    indicators: List[str] = Field(default_factory=list)
    severity: Severity


class ContentAnalysis(BaseModel):
    """Full analysis of a piece of content."""

    threats: List[DetectedThreat] = Field(default_factory=list)
    confidence: float = 0.0
    risk_level: Severity = Severity.LOW
    indicators: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @property
    def is_high_risk(self) -> bool:
        return self.risk_level in (Severity.HIGH, Severity.CRITICAL)


class BehavioralAnalysis(BaseModel):
    behavioral_risks: List[str] = Field(default_factory=list)
    overall_behavioral_risk: Severity = Severity.LOW
    patterns: Dict[str, bool] = Field(default_factory=dict)
