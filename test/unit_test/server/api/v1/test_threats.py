from typing import Dict

import pytest
from httpx import AsyncClient

API = "http://localhost/api/v1"

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
PREDATOR_MESSAGE = "where do you live can we meet alone"
PHISHING_MESSAGE = "verify your account urgent action required"
HARMLESS_MESSAGE = "Shall we grab lunch tomorrow at noon?"


def _report(content: str, **overrides) -> Dict:
    return {
        "type": "phishing",
        "severity": "low",
        "source": "email",
        "detected_content": content,
        "indicators": ["suspicious sender"],
        **overrides,
    }


@pytest.fixture
async def reporter(register_user) -> Dict:
    return await register_user()


class TestReportThreat:
    async def test_analysis_raises_severity_and_confidence(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/report",
            headers={**reporter["headers"], "User-Agent": CHROME_UA},
            json=_report(PREDATOR_MESSAGE, type="predator_behavior", source="message"),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        threat = data["threat"]
        assert threat["severity"] == "critical"
        assert threat["confidence"] == 100
        assert threat["action_taken"] == "blocked"
        assert threat["age_group"] == "adult"
        assert threat["user_id"] == reporter["user"]["id"]
        assert threat["device_info"]["browser"] == "Chrome"
        assert threat["device_info"]["platform"] == "Windows"
        assert threat["ai_analysis"]["behavioral_patterns"] == ["predator_behavior"]
        assert data["ai_analysis"]["risk_level"] == "critical"
        assert data["ai_analysis"]["confidence"] == 1.0

    async def test_analysed_risk_level_replaces_reported_severity(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/report",
            headers=reporter["headers"],
            json=_report(
                HARMLESS_MESSAGE,
                severity="critical",
                confidence=40,
                device_info={"browser": "Custom", "platform": "Linux"},
            ),
        )

        threat = response.json()["data"]["threat"]
        assert threat["severity"] == "low"
        assert threat["confidence"] == 40
        assert threat["device_info"] == {"browser": "Custom", "platform": "Linux"}
        assert threat["ai_analysis"]["recommended_action"] == "Review and block if necessary"

    async def test_website_threat_needs_url(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/report", headers=reporter["headers"], json=_report("fake shop", source="website")
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_indicators_are_required(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/report", headers=reporter["headers"], json=_report("spam", indicators=[])
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "indicators"

    async def test_content_is_sanitized(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/report",
            headers=reporter["headers"],
            json=_report("<script>alert(1)</script>click here"),
        )
        assert "<script>" not in response.json()["data"]["threat"]["detected_content"]


class TestAnalyzeContent:
    async def test_high_risk_content_is_recorded(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/analyze", headers=reporter["headers"], json={"content": PHISHING_MESSAGE}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["analysis"]["risk_level"] == "critical"
        assert data["analysis"]["threats"][0]["type"] == "phishing"
        assert data["threat_record"]["severity"] == "critical"
        assert data["threat_record"]["action_taken"] == "warned"

        history = (await client.get(f"{API}/threats/history", headers=reporter["headers"])).json()["data"]
        assert history["threats"][0]["source"] == "other"
        assert history["threats"][0]["type"] == "phishing"

    async def test_context_source_is_used(self, client: AsyncClient, reporter):
        await client.post(
            f"{API}/threats/analyze",
            headers=reporter["headers"],
            json={"content": PHISHING_MESSAGE, "context": {"source": "email", "sender": "x@y.z"}},
        )

        history = (await client.get(f"{API}/threats/history", headers=reporter["headers"])).json()["data"]
        assert history["threats"][0]["source"] == "email"

    async def test_harmless_content(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/analyze", headers=reporter["headers"], json={"content": HARMLESS_MESSAGE}
        )

        data = response.json()["data"]
        assert data["analysis"]["threats"] == []
        assert data["analysis"]["risk_level"] == "low"
        assert data["analysis"]["confidence"] == 0.0
        assert data["threat_record"] is None

    async def test_overlong_content(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/analyze", headers=reporter["headers"], json={"content": "where " * 1000 + "live"}
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "content"

    async def test_empty_content(self, client: AsyncClient, reporter):
        response = await client.post(f"{API}/threats/analyze", headers=reporter["headers"], json={"content": "   "})
        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Content is required for analysis"


class TestAnalyzeBehavior:
    async def test_risky_conversation(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/behavior",
            headers=reporter["headers"],
            json={
                "timestamp": "2026-03-01T23:30:00",
                "message_history": [
                    {"timestamp": "2026-03-01T23:29:40", "content": "hey"},
                    {"timestamp": "2026-03-01T23:29:50", "content": "you there?"},
                    {"timestamp": "2026-03-01T23:30:00", "content": "answer"},
                ],
                "conversation": "So what school do you go to? Are you home alone?",
                "content": "Reply right now, it's your last chance",
            },
        )

        assert response.status_code == 200
        analysis = response.json()["data"]["analysis"]
        assert analysis["patterns"] == {
            "unusual_timing": True,
            "rapid_messages": True,
            "information_gathering": True,
            "pressure_tactics": True,
        }
        assert analysis["overall_behavioral_risk"] == "high"

    async def test_mixed_offset_timestamps(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/behavior",
            headers=reporter["headers"],
            json={
                "timestamp": "2026-03-01T12:00:10+02:00",
                "message_history": [
                    {"timestamp": "2026-03-01T10:00:00Z"},
                    {"timestamp": "2026-03-01T10:00:05Z"},
                    {"timestamp": "2026-03-01T10:00:10"},
                ],
            },
        )

        assert response.status_code == 200
        analysis = response.json()["data"]["analysis"]
        assert analysis["patterns"]["rapid_messages"] is True
        assert analysis["patterns"]["unusual_timing"] is False
        assert analysis["behavioral_risks"] == ["rapid_messages"]

    async def test_calm_conversation(self, client: AsyncClient, reporter):
        response = await client.post(
            f"{API}/threats/behavior",
            headers=reporter["headers"],
            json={"timestamp": "2026-03-01T14:00:00", "conversation": "How was the match?", "content": "See you"},
        )

        analysis = response.json()["data"]["analysis"]
        assert analysis["behavioral_risks"] == []
        assert analysis["overall_behavioral_risk"] == "low"


class TestThreatHistory:
    async def test_pagination_and_filters(self, client: AsyncClient, reporter):
        for index in range(3):
            await client.post(f"{API}/threats/report", headers=reporter["headers"], json=_report(f"spam {index}"))
        await client.post(
            f"{API}/threats/report",
            headers=reporter["headers"],
            json=_report("odd app", type="malware", source="app"),
        )

        first_page = await client.get(f"{API}/threats/history?page=1&limit=3", headers=reporter["headers"])
        data = first_page.json()["data"]
        assert len(data["threats"]) == 3
        assert data["pagination"] == {"page": 1, "limit": 3, "total": 4, "pages": 2}

        malware = await client.get(f"{API}/threats/history?type=malware", headers=reporter["headers"])
        assert [t["type"] for t in malware.json()["data"]["threats"]] == ["malware"]

    async def test_only_own_threats(self, client: AsyncClient, reporter, register_user):
        bob = await register_user(email="bob@example.com")
        await client.post(f"{API}/threats/report", headers=bob["headers"], json=_report("spam"))

        response = await client.get(f"{API}/threats/history", headers=reporter["headers"])

        assert response.json()["data"]["pagination"]["total"] == 0

    async def test_invalid_page(self, client: AsyncClient, reporter):
        response = await client.get(f"{API}/threats/history?page=0", headers=reporter["headers"])
        assert response.status_code == 400


class TestThreatStats:
    async def test_stats(self, client: AsyncClient, reporter):
        await client.post(f"{API}/threats/report", headers=reporter["headers"], json=_report("spam one"))
        await client.post(
            f"{API}/threats/report",
            headers=reporter["headers"],
            json=_report(PREDATOR_MESSAGE, type="predator_behavior", source="message"),
        )
        await client.post(f"{API}/threats/analyze", headers=reporter["headers"], json={"content": PHISHING_MESSAGE})

        response = await client.get(f"{API}/threats/stats", headers=reporter["headers"])

        data = response.json()["data"]
        assert data["overview"] == {
            "total_threats": 3,
            "blocked_threats": 2,
            "critical_threats": 2,
            "protection_rate": 66.7,
        }
        assert {entry["type"]: entry["count"] for entry in data["by_type"]} == {"phishing": 2, "predator_behavior": 1}
        assert data["common_indicators"][0]["indicator"] == "suspicious sender"
        assert data["time_range"] == "30 days"

    async def test_empty_stats(self, client: AsyncClient, reporter):
        response = await client.get(f"{API}/threats/stats?days=7", headers=reporter["headers"])

        data = response.json()["data"]
        assert data["overview"]["protection_rate"] == 100
        assert data["by_type"] == []
        assert data["time_range"] == "7 days"


async def test_alerts_only_include_serious_threats(client: AsyncClient, reporter):
    await client.post(f"{API}/threats/report", headers=reporter["headers"], json=_report("spam"))
    await client.post(
        f"{API}/threats/report",
        headers=reporter["headers"],
        json=_report(PREDATOR_MESSAGE, type="predator_behavior", source="message"),
    )

    response = await client.get(f"{API}/threats/alerts", headers=reporter["headers"])

    data = response.json()["data"]
    assert [alert["type"] for alert in data["alerts"]] == ["predator_behavior"]
    assert data["time_range"] == "last 24 hours"


async def test_intelligence_covers_all_users(client: AsyncClient, reporter, register_user):
    bob = await register_user(email="bob@example.com")
    await client.post(f"{API}/threats/report", headers=reporter["headers"], json=_report("spam"))
    await client.post(f"{API}/threats/report", headers=bob["headers"], json=_report("more spam"))
    await client.post(
        f"{API}/threats/report", headers=bob["headers"], json=_report("bad file", type="malware", source="app")
    )

    response = await client.get(f"{API}/threats/intelligence", headers=reporter["headers"])

    data = response.json()["data"]
    assert [(entry["type"], entry["count"]) for entry in data["recent_threats"]] == [("phishing", 2), ("malware", 1)]
    assert data["trending_threats"][0]["type"] == "phishing"
    assert data["trending_threats"][0]["total"] == 2
    assert "last_updated" in data


class TestUpdateThreat:
    async def test_resolve(self, client: AsyncClient, reporter):
        created = await client.post(f"{API}/threats/report", headers=reporter["headers"], json=_report("spam"))
        threat_id = created.json()["data"]["threat"]["id"]

        response = await client.put(
            f"{API}/threats/{threat_id}",
            headers=reporter["headers"],
            json={"resolved": True, "action_taken": "reported", "is_false_positive": True},
        )

        assert response.status_code == 200
        threat = response.json()["data"]["threat"]
        assert threat["resolved"] is True
        assert threat["resolved_at"] is not None
        assert threat["action_taken"] == "reported"
        assert threat["is_false_positive"] is True

    async def test_other_users_threat(self, client: AsyncClient, reporter, register_user):
        created = await client.post(f"{API}/threats/report", headers=reporter["headers"], json=_report("spam"))
        bob = await register_user(email="bob@example.com")

        response = await client.put(
            f"{API}/threats/{created.json()['data']['threat']['id']}", headers=bob["headers"], json={"resolved": True}
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Threat not found"

    async def test_malformed_id(self, client: AsyncClient, reporter):
        response = await client.put(f"{API}/threats/xyz", headers=reporter["headers"], json={"resolved": True})
        assert response.status_code == 404
