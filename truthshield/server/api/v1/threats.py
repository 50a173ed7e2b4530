"""
API endpoints for threat reporting and analysis.

Users report threats they run into, ask for ad-hoc content or conversation
analysis, browse their own threat history and alerts, and read anonymised
global threat intelligence.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, Request, status

from truthshield.core.database.base import utc_now
from truthshield.core.database.entities.threats import Threat
from truthshield.core.database.entities.users import User
from truthshield.core.database.repositories import ThreatRepository, UserRepository
from truthshield.core.logging_config import get_logger
from truthshield.core.models.domain import ActionTaken, Severity, ThreatSource, ThreatType
from truthshield.core.models.domain.analysis import ContentAnalysis
from truthshield.core.models.io import BehaviorAnalyze, ContentAnalyze, Pagination, ThreatRead, ThreatReport, ThreatUpdate
from truthshield.core.monitoring import log_threat_analysis
from truthshield.detection import get_detection_engine, sanitize_input
from truthshield.server.api.deps import CurrentUser, SessionDep
from truthshield.server.core import constant
from truthshield.server.responses import ApiError, success_response
from truthshield.services.reports import threats_by_type, trending_threats
from truthshield.services.user_agent import parse_user_agent

logger = get_logger(__name__)

router = APIRouter(tags=["threats"])

DEFAULT_RECOMMENDED_ACTION = "Review and block if necessary"


def _ai_analysis(analysis: ContentAnalysis) -> Dict[str, Any]:
    return {
        "risk_factors": analysis.indicators,
        "behavioral_patterns": [threat.type.value for threat in analysis.threats],
        "recommended_action": analysis.recommendations[0] if analysis.recommendations else DEFAULT_RECOMMENDED_ACTION,
        "analysis_timestamp": utc_now().isoformat(),
    }


def _analyze(content: str, user: User, context: Optional[Dict[str, Any]] = None) -> ContentAnalysis:
    analysis = get_detection_engine().analyze_content(
        content, {**(context or {}), "user_id": str(user.id), "timestamp": utc_now().isoformat()}
    )
    log_threat_analysis(
        risk_level=analysis.risk_level.value,
        threat_types=[threat.type.value for threat in analysis.threats],
        confidence=analysis.confidence,
    )
    return analysis


@router.post(
    "/report",
    status_code=status.HTTP_201_CREATED,
    summary="Report Threat",
    description="Record a threat the user encountered; the content is analysed before storing.",
    response_description="The stored threat and the analysis summary.",
    responses={201: {"description": "Threat reported"}, 400: {"description": "Validation failed"}},
)
async def report_threat(payload: ThreatReport, request: Request, user: CurrentUser, session: SessionDep):
    """
    Report a threat.

    The stored severity is the analysed risk level, falling back to the
    reported severity. The stored confidence is the higher of the reported
    confidence and the analysed confidence (as a percentage). Device details
    are taken from the User-Agent header when the client sends none.
    """
    analysis = _analyze(payload.detected_content, user)
    severity = analysis.risk_level or payload.severity

    if payload.device_info is not None:
        device_info = payload.device_info.model_dump(exclude_none=True)
    else:
        device_info = parse_user_agent(request.headers.get("user-agent"))

    threat = Threat(
        type=payload.type,
        severity=severity,
        source=payload.source,
        url=payload.url,
        domain=payload.domain,
        detected_content=sanitize_input(payload.detected_content),
        indicators=payload.indicators,
        user_id=user.id,
        age_group=user.age_group,
        confidence=min(100.0, max(payload.confidence, analysis.confidence * 100)),
        ai_analysis=_ai_analysis(analysis),
        location=payload.location.model_dump(exclude_none=True) if payload.location else None,
        device_info=device_info,
    )
    threat = await ThreatRepository(session).create(threat)
    await UserRepository(session).touch(user)
    logger.info(f"User {user.id} reported {threat.type.value} threat {threat.id} ({threat.severity.value})")

    return success_response(
        "Threat reported successfully",
        {
            "threat": ThreatRead.model_validate(threat),
            "ai_analysis": {
                "risk_level": analysis.risk_level,
                "confidence": analysis.confidence,
                "recommendations": analysis.recommendations,
            },
        },
    )


@router.post(
    "/analyze",
    summary="Analyze Content",
    description="Scan a piece of content for threats. High and critical results are recorded as warned threats.",
    responses={400: {"description": "Content is missing or empty"}},
)
async def analyze_content(payload: ContentAnalyze, user: CurrentUser, session: SessionDep):
    context = payload.context.model_dump(mode="json", exclude_none=True)
    analysis = _analyze(payload.content, user, context)

    threat_record = None
    if analysis.is_high_risk:
        threat = Threat(
            type=analysis.threats[0].type if analysis.threats else ThreatType.SOCIAL_ENGINEERING,
            severity=analysis.risk_level,
            source=payload.context.source or ThreatSource.OTHER,
            detected_content=sanitize_input(payload.content),
            indicators=analysis.indicators,
            user_id=user.id,
            age_group=user.age_group,
            confidence=min(100.0, analysis.confidence * 100),
            ai_analysis=_ai_analysis(analysis),
            action_taken=ActionTaken.WARNED,
        )
        threat = await ThreatRepository(session).create(threat)
        threat_record = {"id": threat.id, "severity": threat.severity, "action_taken": threat.action_taken}
        logger.info(f"Recorded {threat.severity.value} threat {threat.id} from content analysis")

    return success_response(
        "Content analyzed successfully",
        {"analysis": analysis, "threat_record": threat_record},
    )


@router.post(
    "/behavior",
    summary="Analyze Behaviour",
    description="Check a conversation for unusual timing, rapid messaging, information gathering and pressure.",
)
async def analyze_behavior(payload: BehaviorAnalyze, user: CurrentUser):
    analysis = get_detection_engine().analyze_behavioral_patterns(
        timestamp=payload.timestamp,
        message_history=[message.model_dump() for message in payload.message_history],
        conversation=payload.conversation,
        content=payload.content,
    )
    return success_response("Behavior analyzed successfully", {"analysis": analysis})


@router.get("/history", summary="Threat History", description="Page through the user's threats, newest first.")
async def get_history(
    user: CurrentUser,
    session: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(constant.DEFAULT_PAGE_SIZE, ge=1, le=constant.MAX_PAGE_SIZE),
    type: Optional[ThreatType] = None,
    severity: Optional[Severity] = None,
    resolved: Optional[bool] = None,
):
    threats, total = await ThreatRepository(session).get_history(
        user.id, page, limit, {"type": type, "severity": severity, "resolved": resolved}
    )
    return success_response(
        "Threat history retrieved",
        {
            "threats": [ThreatRead.model_validate(threat) for threat in threats],
            "pagination": Pagination.build(page, limit, total),
        },
    )


@router.get("/stats", summary="Threat Statistics")
async def get_stats(user: CurrentUser, session: SessionDep, days: int = Query(30, ge=1, le=365)):
    repo = ThreatRepository(session)
    total = await repo.count(user.id)
    blocked = await repo.count(user.id, action_taken=ActionTaken.BLOCKED)
    critical = await repo.count(user.id, severity=Severity.CRITICAL)

    return success_response(
        "Threat statistics retrieved",
        {
            "overview": {
                "total_threats": total,
                "blocked_threats": blocked,
                "critical_threats": critical,
                "protection_rate": round(blocked / total * 100, 1) if total else 100,
            },
            "by_type": await repo.get_threat_stats(user.id, days),
            "common_indicators": await repo.get_common_indicators(),
            "time_range": f"{days} days",
        },
    )


@router.get("/alerts", summary="Threat Alerts", description="High and critical threats from the last hours.")
async def get_alerts(user: CurrentUser, session: SessionDep, hours: int = Query(24, ge=1, le=24 * 30)):
    alerts = await ThreatRepository(session).get_alerts(user.id, utc_now() - timedelta(hours=hours))
    return success_response(
        "Threat alerts retrieved",
        {"alerts": [ThreatRead.model_validate(threat) for threat in alerts], "time_range": f"last {hours} hours"},
    )


@router.get(
    "/intelligence",
    summary="Threat Intelligence",
    description="Anonymised threat activity across all users: last 24 hours by type and 7-day trends.",
)
async def get_intelligence(user: CurrentUser, session: SessionDep):
    repo = ThreatRepository(session)
    now = utc_now()
    last_day = await repo.get_recent(now - timedelta(hours=24))
    last_week = await repo.get_recent(now - timedelta(days=7))

    return success_response(
        "Threat intelligence retrieved",
        {
            "recent_threats": threats_by_type(last_day, indicator_limit=10),
            "trending_threats": trending_threats(last_week, limit=5),
            "last_updated": now,
        },
    )


@router.put(
    "/{threat_id}",
    summary="Update Threat",
    description="Change the action taken, resolve or flag a threat as a false positive.",
    responses={404: {"description": "Threat not found"}},
)
async def update_threat(threat_id: str, payload: ThreatUpdate, user: CurrentUser, session: SessionDep):
    repo = ThreatRepository(session)
    threat = await repo.get_for_user(threat_id, user.id)
    if threat is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Threat not found", "NOT_FOUND")

    if payload.action_taken is not None:
        threat.action_taken = payload.action_taken
    if payload.resolved is not None:
        threat.mark_resolved(payload.resolved)
    if payload.is_false_positive is not None:
        threat.is_false_positive = payload.is_false_positive

    threat = await repo.update(threat)
    return success_response("Threat updated successfully", {"threat": ThreatRead.model_validate(threat)})
