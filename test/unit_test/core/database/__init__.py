"""Unit tests for the database layer.

Entity tests exercise the model methods without a database; repository tests
run against in-memory SQLite.
"""
