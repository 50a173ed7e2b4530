"""
Family entity models.

A family groups one parent with any number of children. Membership rows live in
``family_members`` so that a child can belong to at most one family.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, DateTime, Field

from truthshield.core.models.domain import ChildRelationship, ProtectionLevel

from ..base import Base, new_id, utc_now


def default_permissions() -> Dict[str, Any]:
    return {"gaming": True, "social_media": True, "web_browsing": True, "max_screen_time": 120}


def default_family_settings() -> Dict[str, Any]:
    return {
        "overall_protection": ProtectionLevel.MODERATE.value,
        "content_filtering": {
            "social_media": True,
            "gaming_sites": False,
            "shopping_sites": True,
            "educational_sites": False,
        },
        "time_restrictions": {
            "bed_time": {"start": "22:00", "end": "07:00"},
            "weekdays": {"max_hours": 2},
            "weekends": {"max_hours": 4},
        },
        "emergency_contacts": [],
        "alert_preferences": {
            "threat_detected": True,
            "time_limit_exceeded": True,
            "inappropriate_content": True,
            "new_achievement": True,
        },
    }


def default_family_stats() -> Dict[str, Any]:
    return {
        "total_threats_blocked": 0,
        "total_gaming_time": 0,
        "average_security_score": 0,
        "last_activity": None,
    }


def merge_settings(current: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``changes`` into a copy of ``current``."""
    merged = dict(current)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged


class Family(Base, table=True):
    """Family group owned by a single parent.

    Table: families
    """

    __tablename__ = "families"
    __table_args__ = ({"extend_existing": True},)

    id: uuid.UUID = Field(default_factory=new_id, primary_key=True)
    family_name: str = Field(max_length=100)
    parent_id: uuid.UUID = Field(foreign_key="users.id", unique=True, index=True)

    family_settings: Dict[str, Any] = Field(default_factory=default_family_settings, sa_type=JSON)
    family_stats: Dict[str, Any] = Field(default_factory=default_family_stats, sa_type=JSON)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Family(id={self.id}, family_name={self.family_name}, parent_id={self.parent_id})"


class FamilyMember(Base, table=True):
    """Child membership in a family.

    Table: family_members
    """

    __tablename__ = "family_members"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    family_id: uuid.UUID = Field(foreign_key="families.id", index=True)
    child_id: uuid.UUID = Field(foreign_key="users.id", unique=True, index=True)
    relationship: ChildRelationship = Field(default=ChildRelationship.OTHER)
    permissions: Dict[str, Any] = Field(default_factory=default_permissions, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    def __repr__(self) -> str:
        return f"FamilyMember(family_id={self.family_id}, child_id={self.child_id}, relationship={self.relationship})"
