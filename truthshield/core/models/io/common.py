"""
Shared I/O schemas and field validators.

This module contains the response envelope schemas and the reusable
validators applied to request bodies across the API.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, Field

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
PASSWORD_MIN_LENGTH = 8


def validate_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please provide a valid email")
    return value


def validate_password(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError("Password must be at least 8 characters long")
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, and one number"
        )
    return value


def validate_name(value: str) -> str:
    value = value.strip()
    if not 1 <= len(value) <= 50:
        raise ValueError("Name must be between 1 and 50 characters")
    return value


def normalize_utc(value: datetime) -> datetime:
    """Read naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class FieldError(BaseModel):
    """A single field-level validation failure."""

    field: str
    message: str


class ApiResponse(BaseModel):
    """Envelope returned by every endpoint."""

    status: str = Field(description="'success' or 'error'")
    message: str
    timestamp: datetime
    data: Optional[Any] = None
    meta: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Envelope returned for failed requests."""

    status: str = "error"
    message: str
    timestamp: datetime
    error_code: Optional[str] = None
    errors: Optional[List[FieldError]] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


Email = Annotated[str, AfterValidator(validate_email)]
Password = Annotated[str, AfterValidator(validate_password)]
Name = Annotated[str, AfterValidator(validate_name)]
UtcDatetime = Annotated[datetime, AfterValidator(normalize_utc)]
