"""
Response envelope helpers and the API error type.

Every endpoint answers with ``{status, message, timestamp, data?, meta?}``;
failures use ``{status: "error", message, timestamp, error_code?, errors?}``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success_response(message: str, data: Any = None, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    response: Dict[str, Any] = {"status": "success", "message": message, "timestamp": _timestamp()}
    if data is not None:
        response["data"] = data
    if meta is not None:
        response["meta"] = meta
    return response


def error_response(
    message: str, error_code: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None
) -> Dict[str, Any]:
    response: Dict[str, Any] = {"status": "error", "message": message, "timestamp": _timestamp()}
    if error_code:
        response["error_code"] = error_code
    if errors:
        response["errors"] = errors
    return response


class ApiError(HTTPException):
    """HTTP error carrying an optional machine-readable error code."""

    def __init__(self, status_code: int, message: str, error_code: Optional[str] = None):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
