"""
Report builders for families, enterprises and global threat intelligence.

Functions here are pure: they take entities and pre-aggregated statistics and
return plain dictionaries ready to be placed in a response envelope.
"""

from __future__ import annotations

import uuid
from collections import Counter, OrderedDict, defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from truthshield.core.database.base import utc_now
from truthshield.core.database.entities.threats import Threat
from truthshield.core.database.entities.users import User
from truthshield.core.models.domain import ActionTaken, GameType, Severity, ThreatType

TOTAL_GAMES = len(GameType)

SCREEN_TIME_LIMIT_HOURS = 20
LOW_SECURITY_SCORE = 50
RECENT_THREATS_LIMIT = 5


# ---------------------------------------------------------------------------
# Threat aggregation
# ---------------------------------------------------------------------------


def summarize_member_threats(threats: Iterable[Threat], now: datetime | None = None) -> Dict[uuid.UUID, Dict[str, int]]:
    """Per-user totals of blocked, critical and last-7-day threats."""
    now = now or utc_now()
    week_ago = now - timedelta(days=7)
    stats: Dict[uuid.UUID, Dict[str, int]] = defaultdict(lambda: {"total": 0, "blocked": 0, "critical": 0, "recent": 0})
    for threat in threats:
        entry = stats[threat.user_id]
        entry["total"] += 1
        if threat.action_taken == ActionTaken.BLOCKED:
            entry["blocked"] += 1
        if threat.severity == Severity.CRITICAL:
            entry["critical"] += 1
        if threat.created_at >= week_ago:
            entry["recent"] += 1
    return dict(stats)


def threats_by_type(threats: Iterable[Threat], indicator_limit: int = 0) -> List[Dict[str, Any]]:
    """Group threats by type with counts, mean confidence and severity breakdown, largest first."""
    grouped: Dict[str, Dict[str, Any]] = OrderedDict()
    for threat in threats:
        key = ThreatType(threat.type).value
        bucket = grouped.setdefault(key, {"type": key, "count": 0, "confidence": 0.0, "severity_breakdown": [], "indicators": []})
        bucket["count"] += 1
        bucket["confidence"] += float(threat.confidence or 0)
        bucket["severity_breakdown"].append(Severity(threat.severity).value)
        bucket["indicators"].extend(threat.indicators or [])

    result = []
    for bucket in grouped.values():
        entry = {
            "type": bucket["type"],
            "count": bucket["count"],
            "average_confidence": round(bucket["confidence"] / bucket["count"], 2),
            "severity_breakdown": bucket["severity_breakdown"],
        }
        if indicator_limit:
            entry["common_indicators"] = bucket["indicators"][:indicator_limit]
        result.append(entry)
    return sorted(result, key=lambda entry: entry["count"], reverse=True)


def trending_threats(threats: Iterable[Threat], limit: int = 5) -> List[Dict[str, Any]]:
    """Daily counts per threat type with growth from the first to the last active day.

    Growth is ``(last - first) / first`` over the days on which the type was
    seen; a type seen on a single day has zero growth.
    """
    daily: Dict[str, Counter] = defaultdict(Counter)
    for threat in threats:
        daily[ThreatType(threat.type).value][threat.created_at.strftime("%Y-%m-%d")] += 1

    trending = []
    for threat_type, counts in daily.items():
        trend = [{"day": day, "count": counts[day]} for day in sorted(counts)]
        growth = 0.0
        if len(trend) > 1:
            first, last = trend[0]["count"], trend[-1]["count"]
            growth = round((last - first) / first, 2)
        trending.append({"type": threat_type, "trend": trend, "total": sum(counts.values()), "growth": growth})

    trending.sort(key=lambda entry: entry["total"], reverse=True)
    return trending[:limit]


# ---------------------------------------------------------------------------
# Family reports
# ---------------------------------------------------------------------------


def family_recommendations(
    children: Sequence[User],
    threat_stats: Mapping[uuid.UUID, Mapping[str, int]],
    gaming_stats: Mapping[uuid.UUID, Mapping[str, Any]],
) -> List[Dict[str, str]]:
    recommendations = []

    screen_time_hours = sum(stat.get("total_play_time", 0) for stat in gaming_stats.values()) / 3600
    if screen_time_hours > SCREEN_TIME_LIMIT_HOURS:
        recommendations.append(
            {
                "type": "screen_time",
                "priority": "medium",
                "message": "Consider setting screen time limits for children",
                "suggestion": "Use family settings to enforce reasonable gaming limits",
            }
        )

    low_security = [child for child in children if child.security_score < LOW_SECURITY_SCORE]
    if low_security:
        recommendations.append(
            {
                "type": "security_training",
                "priority": "high",
                "message": f"{len(low_security)} family members have low security scores",
                "suggestion": "Encourage them to complete security training games",
            }
        )

    recent_threats = sum(stat.get("recent", 0) for stat in threat_stats.values())
    if recent_threats > RECENT_THREATS_LIMIT:
        recommendations.append(
            {
                "type": "threat_awareness",
                "priority": "high",
                "message": "High number of recent threats detected",
                "suggestion": "Review threat history and enable stricter protection settings",
            }
        )

    return recommendations


# ---------------------------------------------------------------------------
# Enterprise reports
# ---------------------------------------------------------------------------


def _days_inactive(user: User, now: datetime) -> int:
    return (now - user.last_active).days


def calculate_employee_risk(
    employee: User, threats: Sequence[Threat], game_progress: Sequence[Mapping[str, Any]], now: datetime | None = None
) -> Severity:
    """Risk rating from security score, recent and critical threats, training and activity."""
    now = now or utc_now()
    week_ago = now - timedelta(days=7)

    risk = (100 - employee.security_score) * 0.5
    risk += sum(1 for threat in threats if threat.created_at > week_ago) * 10
    risk += sum(1 for threat in threats if threat.severity == Severity.CRITICAL) * 20

    trained_games = sum(1 for game in game_progress if game.get("completed_sessions", 0) > 0)
    risk += (TOTAL_GAMES - trained_games) * 5

    if _days_inactive(employee, now) > 30:
        risk += 25

    if risk >= 70:
        return Severity.HIGH
    if risk >= 40:
        return Severity.MEDIUM
    return Severity.LOW


def employee_recommendations(
    employee: User, threats: Sequence[Threat], game_progress: Sequence[Mapping[str, Any]], now: datetime | None = None
) -> List[Dict[str, str]]:
    now = now or utc_now()
    recommendations = []

    if employee.security_score < LOW_SECURITY_SCORE:
        recommendations.append(
            {
                "type": "basic_training",
                "priority": "high",
                "message": "Low security score detected",
                "action": "Complete basic security training games",
            }
        )

    week_ago = now - timedelta(days=7)
    if sum(1 for threat in threats if threat.created_at > week_ago) > 3:
        recommendations.append(
            {
                "type": "threat_awareness",
                "priority": "high",
                "message": "High number of recent threats",
                "action": "Review threat patterns and security practices",
            }
        )

    trained_games = sum(1 for game in game_progress if game.get("completed_sessions", 0) > 0)
    if trained_games < 3:
        recommendations.append(
            {
                "type": "training_completion",
                "priority": "medium",
                "message": "Incomplete security training",
                "action": f"Complete {3 - trained_games} more security games",
            }
        )

    return recommendations
