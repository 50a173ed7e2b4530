"""
Unit tests for the Logfire monitoring module.

Covers initialisation under the different feature flags and the best-effort
event emitters.
"""

from unittest.mock import Mock, patch

from fastapi import FastAPI

from truthshield.core import monitoring
from truthshield.core.monitoring import (
    initialize_logfire,
    log_api_request,
    log_error,
    log_game_completed,
    log_threat_analysis,
)

MODULE = "truthshield.core.monitoring"


class TestInitializeLogfire:
    @patch(f"{MODULE}.LOGFIRE_ENABLED", False)
    @patch(f"{MODULE}.logfire")
    def test_disabled(self, mock_logfire):
        assert initialize_logfire() is False
        mock_logfire.configure.assert_not_called()

    @patch(f"{MODULE}.LOGFIRE_ENABLED", True)
    @patch(f"{MODULE}.LOGFIRE_TOKEN", "")
    @patch(f"{MODULE}.logfire")
    @patch(f"{MODULE}.logger")
    def test_enabled_without_token(self, mock_logger, mock_logfire):
        assert initialize_logfire() is False
        mock_logger.warning.assert_called_once()
        mock_logfire.configure.assert_not_called()

    @patch(f"{MODULE}.LOGFIRE_ENABLED", True)
    @patch(f"{MODULE}.LOGFIRE_TOKEN", "test-token")
    @patch(f"{MODULE}.LOGFIRE_TRACE_SQLALCHEMY", True)
    @patch(f"{MODULE}.LOGFIRE_TRACE_FASTAPI", True)
    @patch(f"{MODULE}.logfire")
    def test_configures_and_instruments(self, mock_logfire):
        app = FastAPI()
        assert initialize_logfire(app) is True

        mock_logfire.configure.assert_called_once_with(
            token="test-token",
            service_name=monitoring.LOGFIRE_SERVICE_NAME,
            service_version=monitoring.LOGFIRE_SERVICE_VERSION,
            environment=monitoring.LOGFIRE_ENVIRONMENT,
        )
        mock_logfire.instrument_sqlalchemy.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once_with(app=app)

    @patch(f"{MODULE}.LOGFIRE_ENABLED", True)
    @patch(f"{MODULE}.LOGFIRE_TOKEN", "test-token")
    @patch(f"{MODULE}.LOGFIRE_TRACE_SQLALCHEMY", False)
    @patch(f"{MODULE}.LOGFIRE_TRACE_FASTAPI", True)
    @patch(f"{MODULE}.logfire")
    def test_skips_fastapi_without_app(self, mock_logfire):
        assert initialize_logfire(None) is True
        mock_logfire.instrument_sqlalchemy.assert_not_called()
        mock_logfire.instrument_fastapi.assert_not_called()

    @patch(f"{MODULE}.LOGFIRE_ENABLED", True)
    @patch(f"{MODULE}.LOGFIRE_TOKEN", "test-token")
    @patch(f"{MODULE}.LOGFIRE_TRACE_SQLALCHEMY", True)
    @patch(f"{MODULE}.LOGFIRE_TRACE_FASTAPI", False)
    @patch(f"{MODULE}.logfire")
    @patch(f"{MODULE}.logger")
    def test_instrumentation_failure_is_logged(self, mock_logger, mock_logfire):
        mock_logfire.instrument_sqlalchemy.side_effect = RuntimeError("no engine")

        assert initialize_logfire() is True
        mock_logger.warning.assert_called_once()
        assert "no engine" in mock_logger.warning.call_args[0][0]


class TestEventEmitters:
    @patch(f"{MODULE}.logfire")
    def test_log_api_request(self, mock_logfire):
        log_api_request("GET", "/api/v1/health", 200, 1.5)
        mock_logfire.info.assert_called_once_with(
            "API request completed", method="GET", path="/api/v1/health", status_code=200, duration_ms=1.5
        )

    @patch(f"{MODULE}.logfire")
    def test_log_threat_analysis(self, mock_logfire):
        log_threat_analysis(risk_level="critical", threat_types=["phishing"], confidence=0.9)
        mock_logfire.info.assert_called_once_with(
            "Content analysed", risk_level="critical", threat_types=["phishing"], confidence=0.9
        )

    @patch(f"{MODULE}.logfire")
    def test_log_game_completed(self, mock_logfire):
        log_game_completed(game_type="scam_spotter", difficulty="easy", score=120.0, xp_gained=17)
        kwargs = mock_logfire.info.call_args.kwargs
        assert kwargs["game_type"] == "scam_spotter"
        assert kwargs["xp_gained"] == 17

    @patch(f"{MODULE}.logfire")
    def test_log_error_includes_context(self, mock_logfire):
        log_error("ValueError", "bad input", {"path": "/x"})
        mock_logfire.error.assert_called_once_with("ValueError: bad input", path="/x")

    @patch(f"{MODULE}.logfire")
    @patch(f"{MODULE}.logger")
    def test_emitter_failures_are_swallowed(self, mock_logger, mock_logfire):
        mock_logfire.info = Mock(side_effect=RuntimeError("down"))
        mock_logfire.error = Mock(side_effect=RuntimeError("down"))

        log_api_request("GET", "/", 200, 0.1)
        log_threat_analysis("low", [], 0.0)
        log_game_completed("scam_spotter", "easy", 0, 0)
        log_error("E", "m")

        assert mock_logger.debug.call_count == 4
