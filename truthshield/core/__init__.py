"""Core layer: configuration-independent domain models, persistence, logging and monitoring."""
