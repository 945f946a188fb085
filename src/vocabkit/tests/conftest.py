"""Test configuration."""
import os
from datetime import UTC, datetime
from typing import Generator

import pytest
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

# Import after environment setup
from sqlalchemy.orm import Session  # noqa: E402

from vocabkit.config import GenerationSettings  # noqa: E402
from vocabkit.models.base import SessionLocal, reset_db  # noqa: E402

fake = Faker()

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """A fixed point in time."""
    return FIXED_NOW


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    reset_db()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def generation_settings() -> GenerationSettings:
    """Generation settings with a dummy key and a local endpoint."""
    return GenerationSettings(
        api_url="https://llm.test/v1/chat/completions",
        model="test-model",
        temperature=0.5,
        timeout=5,
        api_key="sk-test-key",
        api_key_override="",
        max_attempts=1,
        retry_delay=0,
    )
