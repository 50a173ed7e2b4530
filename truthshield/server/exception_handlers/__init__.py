"""
Exception handlers for the TruthShield server.

This package contains custom exception handlers for different error types
and a setup function to register them with the FastAPI application.
"""

from .global_handler import global_exception_handler, setup_exception_handlers
from .http_handlers import format_validation_errors, http_exception_handler, validation_exception_handler

__all__ = [
    "format_validation_errors",
    "global_exception_handler",
    "http_exception_handler",
    "setup_exception_handlers",
    "validation_exception_handler",
]
