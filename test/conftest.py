from __future__ import annotations

import os

# Settings are read at import time, so the test environment must be in place
# before anything from truthshield is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("TRUTHSHIELD_BCRYPT_ROUNDS", "4")
os.environ.setdefault("TRUTHSHIELD_JWT_SECRET", "test-secret-key-with-at-least-32-bytes!")
os.environ.setdefault("LOGFIRE_ENABLED", "false")
os.environ.setdefault("ENABLE_FILE_LOGGING", "false")
