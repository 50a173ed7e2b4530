"""
I/O models for API requests and responses.

These Pydantic schemas define the contract between the REST API and its
clients. Database entities never leave the service directly; they are
converted to the ``*Read`` schemas first.
"""

from .common import ApiResponse, ErrorResponse, FieldError, Pagination
from .families import (
    ChildAdd,
    ChildPermissions,
    FamilyCreate,
    FamilyMemberRead,
    FamilyRead,
    FamilySettingsRequest,
    FamilySettingsUpdate,
)
from .games import AnswerSubmit, GameComplete, GameFeedback, GameStart
from .threats import (
    BehaviorAnalyze,
    ContentAnalyze,
    ThreatRead,
    ThreatReport,
    ThreatUpdate,
)
from .users import (
    AuthPayload,
    PasswordChange,
    ProfileUpdate,
    UserLogin,
    UserRead,
    UserRegister,
    UserSummary,
)

__all__ = [
    "AnswerSubmit",
    "ApiResponse",
    "AuthPayload",
    "BehaviorAnalyze",
    "ChildAdd",
    "ChildPermissions",
    "ContentAnalyze",
    "ErrorResponse",
    "FamilyCreate",
    "FamilyMemberRead",
    "FamilyRead",
    "FamilySettingsRequest",
    "FamilySettingsUpdate",
    "FieldError",
    "GameComplete",
    "GameFeedback",
    "GameStart",
    "Pagination",
    "PasswordChange",
    "ProfileUpdate",
    "ThreatRead",
    "ThreatReport",
    "ThreatUpdate",
    "UserLogin",
    "UserRead",
    "UserRegister",
    "UserSummary",
]
