"""Shared pytest fixtures.

Provides:
- A controllable clock for the state machines and the token store
- Alice's personal information and job preferences
- UploadedFile factory (metadata only, no bytes)
- In-memory SQLite session with the portal tables

Usage:
    def test_first_upload(engine, alice, alice_prefs, uploaded_file):
        files = {"passport": [uploaded_file("passport")]}
        result = engine.submit_upload(None, files, alice, alice_prefs)
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("S3_ACCESS_KEY_ID", "testing")
os.environ.setdefault("S3_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("S3_BUCKET_NAME", "test-applicant-documents")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("LOG_JSON", "false")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from domain.applications import (
    ApplicationStatusEngine,
    JobPreferences,
    PersonalInfo,
    UploadedFile,
)
from models.base import Base


class FakeClock:
    """Deterministic clock; advance() moves time forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def engine(clock) -> ApplicationStatusEngine:
    return ApplicationStatusEngine(clock=clock)


@pytest.fixture
def alice() -> PersonalInfo:
    return PersonalInfo(
        full_name="Alice Example",
        email="alice@example.com",
        phone="+1 555 0100",
        age=29,
        gender="female",
        marital_status="single",
        country="Kenya",
        visa_type="work",
    )


@pytest.fixture
def alice_prefs() -> JobPreferences:
    return JobPreferences(preferred_country="Canada", preferred_job="Nurses")


@pytest.fixture
def uploaded_file():
    """Factory for UploadedFile metadata."""

    def _make(kind: str, name: str = None, owner: str = "alice@example.com") -> UploadedFile:
        name = name or f"{kind}.pdf"
        return UploadedFile(
            filename=name,
            original_name=name,
            size=2048,
            storage_key=f"{owner}/{kind}/{name}",
            mime_type="application/pdf",
        )

    return _make


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory SQLite database per test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()
