"""
User I/O models for API requests and responses.

These schemas define the contract for registration, login, profile updates
and the public view of a user account.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from truthshield.core.models.domain import AgeGroup, Persona

from .common import Email, Name, Password, validate_name


class UserRegister(BaseModel):
    """Schema for registering a new account."""

    email: Email = Field(description="Login email, stored lowercase")
    password: Password = Field(description="At least 8 characters with lower, upper case and a digit")
    first_name: Name
    last_name: Name
    age: int = Field(ge=6, le=120)
    persona: Persona = Field(default=Persona.INDIVIDUAL)
    company: Optional[str] = Field(default=None, max_length=200, description="Required for enterprise accounts")
    department: Optional[str] = Field(default=None, max_length=200)
    employee_id: Optional[str] = Field(default=None, max_length=100)

    @field_validator("company", "department", "employee_id")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def _enterprise_needs_company(self) -> "UserRegister":
        if self.persona == Persona.ENTERPRISE and not self.company:
            raise ValueError("Company is required for enterprise accounts")
        return self


class UserLogin(BaseModel):
    email: Email
    password: str = Field(min_length=1, description="Password is required")


class UserSettingsUpdate(BaseModel):
    notifications: Optional[bool] = None
    real_time_protection: Optional[bool] = None
    data_collection: Optional[bool] = None
    theme: Optional[Literal["light", "dark", "auto"]] = None


class ProfileUpdate(BaseModel):
    """Schema for updating the current user's profile. Only provided fields change."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=6, le=120)
    settings: Optional[UserSettingsUpdate] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _names(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else validate_name(value)


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: Password


class UserRead(BaseModel):
    """Public view of a user account. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    age: int
    age_group: AgeGroup
    persona: Persona
    security_score: int
    level: int
    experience: int
    achievements: List[Dict[str, Any]]
    game_progress: Dict[str, Dict[str, Any]]
    is_parent: bool
    parent_id: Optional[uuid.UUID] = None
    is_enterprise_admin: bool
    company: Optional[str] = None
    department: Optional[str] = None
    employee_id: Optional[str] = None
    settings: Dict[str, Any]
    last_active: datetime
    is_verified: bool
    created_at: datetime


class UserSummary(BaseModel):
    """Compact user view used in leaderboards and family listings."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    first_name: str
    last_name: str
    age: int
    age_group: AgeGroup
    security_score: int
    level: int
    last_active: datetime


class AuthPayload(BaseModel):
    token: str
    user: UserRead
