"""
API endpoints for enterprise administrators.

Admins see a company-wide dashboard (employees, threats, training) and a
per-employee security report with a risk assessment.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, status

from truthshield.core.database.base import utc_now
from truthshield.core.database.entities.users import User
from truthshield.core.database.repositories import GameSessionRepository, ThreatRepository, UserRepository
from truthshield.core.logging_config import get_logger
from truthshield.core.models.domain import Persona, Severity
from truthshield.core.models.io import ThreatRead
from truthshield.server.api.deps import CurrentUser, SessionDep
from truthshield.server.responses import ApiError, success_response
from truthshield.services.reports import (
    TOTAL_GAMES,
    calculate_employee_risk,
    employee_recommendations,
    threats_by_type,
)

logger = get_logger(__name__)

router = APIRouter(tags=["enterprise"])

THREAT_HISTORY_LIMIT = 50
ACTIVE_WINDOW_DAYS = 7


def _require_admin(user: User, message: str) -> str:
    if Persona(user.persona) != Persona.ENTERPRISE or not user.is_enterprise_admin or not user.company:
        raise ApiError(status.HTTP_403_FORBIDDEN, message, "FORBIDDEN")
    return user.company


@router.get(
    "/dashboard",
    summary="Enterprise Dashboard",
    description="Company overview, 30-day threats by type, training by game and the employee list.",
    responses={403: {"description": "Enterprise admin access required"}},
)
async def get_dashboard(user: CurrentUser, session: SessionDep):
    company = _require_admin(user, "Enterprise access required")
    now = utc_now()

    employees = await UserRepository(session).get_company_users(company)
    active_users = sum(1 for e in employees if e.last_active > now - timedelta(days=ACTIVE_WINDOW_DAYS))
    total = len(employees)

    threats = threats_by_type(await ThreatRepository(session).get_company_threats(company, now - timedelta(days=30)))
    training = await GameSessionRepository(session).get_company_training_stats(company)

    dashboard = {
        "overview": {
            "total_employees": total,
            "active_users": active_users,
            "active_rate": round(active_users / total * 100, 1) if total else 0,
            "average_security_score": round(sum(e.security_score for e in employees) / total) if total else 0,
            "company": company,
        },
        "threats": {
            "by_type": threats,
            "total_threats": sum(entry["count"] for entry in threats),
            "time_range": "last 30 days",
        },
        "training": training,
        "employees": [
            {
                "id": employee.id,
                "name": employee.full_name,
                "email": employee.email,
                "department": employee.department,
                "security_score": employee.security_score,
                "level": employee.level,
                "last_active": employee.last_active,
                "training_progress": employee.completed_games(),
            }
            for employee in employees
        ],
    }
    return success_response("Enterprise dashboard retrieved", {"dashboard": dashboard})


@router.get(
    "/employees/{employee_id}/report",
    summary="Employee Security Report",
    description="Risk assessment, training progress and threat history of one employee of the admin's company.",
    responses={
        403: {"description": "Admin access required"},
        404: {"description": "Employee not found in the admin's company"},
    },
)
async def get_employee_report(employee_id: str, user: CurrentUser, session: SessionDep):
    """
    Build a security report for one employee.

    The risk level grows with a low security score, threats in the last week,
    critical threats, games never completed and more than 30 days of inactivity.
    """
    company = _require_admin(user, "Admin access required")
    employee = await UserRepository(session).get_company_employee(employee_id, company)
    if employee is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Employee not found", "NOT_FOUND")

    now = utc_now()
    threat_history = await ThreatRepository(session).list(
        limit=THREAT_HISTORY_LIMIT, filters={"user_id": employee.id}
    )
    game_progress = await GameSessionRepository(session).get_user_progress(employee.id)
    week_ago = now - timedelta(days=7)

    report = {
        "employee": {
            "id": employee.id,
            "name": employee.full_name,
            "department": employee.department,
            "email": employee.email,
            "security_score": employee.security_score,
            "level": employee.level,
            "last_active": employee.last_active,
        },
        "risk_assessment": calculate_employee_risk(employee, threat_history, game_progress, now),
        "training": {
            "progress": game_progress,
            "completed_games": employee.completed_games(),
            "total_games": TOTAL_GAMES,
        },
        "threats": {
            "history": [ThreatRead.model_validate(threat) for threat in threat_history[:10]],
            "total": len(threat_history),
            "critical": sum(1 for threat in threat_history if threat.severity == Severity.CRITICAL),
            "recent": sum(1 for threat in threat_history if threat.created_at > week_ago),
        },
        "recommendations": employee_recommendations(employee, threat_history, game_progress, now),
    }
    logger.info(f"Admin {user.id} generated report for employee {employee.id}")
    return success_response("Employee security report generated", {"report": report, "generated_at": now})
