"""Shared test configuration.

JWT_SECRET has no default in Settings, so it must exist before any module
imports config.settings.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret")
