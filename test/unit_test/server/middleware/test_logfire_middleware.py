"""
Unit tests for Logfire middleware.

Covers request timing, the process-time header, slow request warnings and
failure reporting.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from starlette.responses import Response

from truthshield.server.middleware import LogfireMiddleware

MODULE = "truthshield.server.middleware.logfire_middleware"


def _request(method: str = "GET", path: str = "/api/v1/health"):
    request = AsyncMock(spec=Request)
    request.method = method
    request.url.path = path
    request.state = MagicMock()
    return request


class TestDispatch:
    async def test_successful_request_is_reported(self):
        async def call_next(request):
            return Response(content="ok", status_code=201)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch(f"{MODULE}.log_api_request") as mock_log:
            response = await middleware.dispatch(_request("POST", "/api/v1/threats/report"), call_next)

        assert response.status_code == 201
        assert "X-Process-Time" in response.headers
        kwargs = mock_log.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["path"] == "/api/v1/threats/report"
        assert kwargs["status_code"] == 201
        assert kwargs["duration_ms"] >= 0

    async def test_failed_request_is_reported_and_reraised(self):
        async def call_next(request):
            raise RuntimeError("downstream failure")

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch(f"{MODULE}.log_api_request") as mock_log, patch(f"{MODULE}.logger") as mock_logger:
            with pytest.raises(RuntimeError, match="downstream failure"):
                await middleware.dispatch(_request(), call_next)

        assert mock_log.call_args.kwargs["status_code"] == 500
        mock_logger.error.assert_called_once()

    async def test_slow_request_warning(self):
        async def call_next(request):
            return Response(status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch(f"{MODULE}.log_api_request"), patch(f"{MODULE}.logger") as mock_logger, patch(
            f"{MODULE}.SLOW_REQUEST_MS", -1
        ):
            await middleware.dispatch(_request(), call_next)

        mock_logger.warning.assert_called_once()
        assert "Slow API request" in mock_logger.warning.call_args[0][0]


async def test_middleware_in_application():
    app = FastAPI()
    app.add_middleware(LogfireMiddleware)

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    with patch(f"{MODULE}.log_api_request") as mock_log:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/ping")

    assert response.status_code == 200
    assert float(response.headers["X-Process-Time"]) >= 0
    mock_log.assert_called_once()
