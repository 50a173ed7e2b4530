"""
TruthShield Server Package.

This package contains the web server implementation for the TruthShield platform.

Subpackages:
    api: FastAPI route definitions, shared dependencies and endpoint logic.
    core: Settings, constants and token / password security helpers.
    exception_handlers: Translation of errors into the response envelope.
    middleware: Request timing and monitoring.
"""
