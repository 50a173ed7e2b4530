"""
Threat I/O models for API requests and responses.

These schemas cover threat reports, ad-hoc content analysis, behavioural
analysis and the public view of a stored threat.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from truthshield.core.models.domain import ActionTaken, AgeGroup, Severity, ThreatSource, ThreatType

from .common import UtcDatetime

MAX_CONTENT_LENGTH = 5000


class Location(BaseModel):
    ip_address: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None


class DeviceInfo(BaseModel):
    user_agent: Optional[str] = None
    platform: Optional[str] = None
    browser: Optional[str] = None


class ThreatReport(BaseModel):
    """Schema for reporting a threat encountered by the user."""

    type: ThreatType
    severity: Severity
    source: ThreatSource
    url: Optional[str] = Field(default=None, max_length=2048)
    domain: Optional[str] = Field(default=None, max_length=255)
    detected_content: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH)
    indicators: List[str] = Field(min_length=1, description="At least one indicator is required")
    location: Optional[Location] = None
    device_info: Optional[DeviceInfo] = None
    confidence: float = Field(default=0, ge=0, le=100)

    @field_validator("detected_content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Detected content must be between 1 and 5000 characters")
        return value.strip()

    @field_validator("indicators")
    @classmethod
    def _indicator_length(cls, value: List[str]) -> List[str]:
        cleaned = [indicator.strip() for indicator in value]
        if any(not 1 <= len(indicator) <= 200 for indicator in cleaned):
            raise ValueError("Each indicator must be between 1 and 200 characters")
        return cleaned

    @model_validator(mode="after")
    def _url_for_web_sources(self) -> "ThreatReport":
        if self.source in (ThreatSource.WEBSITE, ThreatSource.SOCIAL_MEDIA) and not self.url:
            raise ValueError("A url is required for website and social media threats")
        return self


class AnalysisContext(BaseModel):
    model_config = ConfigDict(extra="allow")

    source: Optional[ThreatSource] = None


class ContentAnalyze(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH, description="Content is required for analysis")
    context: AnalysisContext = Field(default_factory=AnalysisContext)

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Content is required for analysis")
        return value


class ConversationMessage(BaseModel):
    timestamp: UtcDatetime
    content: Optional[str] = None


class BehaviorAnalyze(BaseModel):
    """Conversation to check for risky behaviour patterns."""

    timestamp: Optional[UtcDatetime] = Field(default=None, description="When the latest message was sent")
    message_history: List[ConversationMessage] = Field(default_factory=list)
    conversation: str = ""
    content: str = ""


class ThreatUpdate(BaseModel):
    action_taken: Optional[ActionTaken] = None
    resolved: Optional[bool] = None
    is_false_positive: Optional[bool] = None


class ThreatRead(BaseModel):
    """Public view of a stored threat."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    type: ThreatType
    severity: Severity
    source: ThreatSource
    url: Optional[str] = None
    domain: Optional[str] = None
    detected_content: str
    indicators: List[str]
    age_group: AgeGroup
    action_taken: ActionTaken
    confidence: float
    ai_analysis: Optional[Dict[str, Any]] = None
    location: Optional[Dict[str, Any]] = None
    device_info: Optional[Dict[str, Any]] = None
    is_false_positive: bool
    resolved: bool
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
