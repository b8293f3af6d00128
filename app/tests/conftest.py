import os

import pytest

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")
os.environ.setdefault("SUPERVISOR_USERNAME", "supervisor")
os.environ.setdefault("SUPERVISOR_PASSWORD", "correct-horse")
os.environ.setdefault("JWT_SECRET", "test-secret")

from app.core.config import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
