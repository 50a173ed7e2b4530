"""
Family I/O models for API requests and responses.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from truthshield.core.models.domain import ChildRelationship, ProtectionLevel


class ChildPermissions(BaseModel):
    gaming: Optional[bool] = None
    social_media: Optional[bool] = None
    web_browsing: Optional[bool] = None
    max_screen_time: Optional[int] = Field(default=None, ge=0, le=1440, description="Minutes per day")


class ChildAdd(BaseModel):
    child_id: uuid.UUID
    relationship: ChildRelationship = ChildRelationship.OTHER
    permissions: Optional[ChildPermissions] = None


class FamilyCreate(BaseModel):
    family_name: str
    children: List[ChildAdd] = Field(default_factory=list)

    @field_validator("family_name")
    @classmethod
    def _family_name(cls, value: str) -> str:
        value = value.strip()
        if not 1 <= len(value) <= 100:
            raise ValueError("Family name must be between 1 and 100 characters")
        return value

    @field_validator("children")
    @classmethod
    def _unique_children(cls, value: List[ChildAdd]) -> List[ChildAdd]:
        child_ids = [child.child_id for child in value]
        if len(child_ids) != len(set(child_ids)):
            raise ValueError("Each child can only be added once")
        return value


class EmergencyContact(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=50)
    relationship: Optional[str] = None
    is_primary: bool = False


class FamilySettingsUpdate(BaseModel):
    """Partial family settings; nested sections are merged into the stored settings."""

    overall_protection: Optional[ProtectionLevel] = None
    content_filtering: Optional[Dict[str, bool]] = None
    time_restrictions: Optional[Dict[str, Any]] = None
    emergency_contacts: Optional[List[EmergencyContact]] = None
    alert_preferences: Optional[Dict[str, bool]] = None


class FamilySettingsRequest(BaseModel):
    family_settings: FamilySettingsUpdate


class FamilyMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    child_id: uuid.UUID
    relationship: ChildRelationship
    permissions: Dict[str, Any]


class FamilyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    family_name: str
    parent_id: uuid.UUID
    family_settings: Dict[str, Any]
    family_stats: Dict[str, Any]
    is_active: bool
    created_at: datetime
