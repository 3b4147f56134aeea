"""Root conftest — shared test configuration."""

import os

# Settings are cached on first use; pin test values before any app import.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("UPLOAD_DIR", "test-uploads")
