"""Shared models: domain enumerations and API I/O schemas."""
