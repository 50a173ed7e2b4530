"""
Threat entity model.

Threats are reported by users or recorded automatically when analysed content
scores as high or critical risk.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, DateTime, Field

from truthshield.core.models.domain import ActionTaken, AgeGroup, Severity, ThreatSource, ThreatType

from ..base import Base, new_id, utc_now


class Threat(Base, table=True):
    """Persistent threat record.

    Table: threats
    """

    __tablename__ = "threats"
    __table_args__ = ({"extend_existing": True},)

    id: uuid.UUID = Field(default_factory=new_id, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    type: ThreatType = Field(index=True)
    severity: Severity = Field(index=True)
    source: ThreatSource
    url: Optional[str] = Field(default=None, max_length=2048)
    domain: Optional[str] = Field(default=None, index=True, max_length=255)
    detected_content: str
    indicators: List[str] = Field(default_factory=list, sa_type=JSON)
    age_group: AgeGroup

    action_taken: ActionTaken = Field(default=ActionTaken.BLOCKED)
    confidence: float = Field(default=0, ge=0, le=100)

    # risk_factors, behavioral_patterns, recommended_action, analysis_timestamp
    ai_analysis: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    location: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    device_info: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    is_false_positive: bool = Field(default=False, index=True)
    resolved: bool = Field(default=False)
    resolved_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, sa_column_kwargs={"onupdate": utc_now})

    def mark_resolved(self, resolved: bool) -> None:
        self.resolved = resolved
        self.resolved_at = utc_now() if resolved else None

    def __repr__(self) -> str:
        return f"Threat(id={self.id}, type={self.type}, severity={self.severity}, user_id={self.user_id})"
