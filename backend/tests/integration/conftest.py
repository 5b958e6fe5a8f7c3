"""Fixtures for API integration tests.

The app runs against in-memory SQLite and a moto-mocked S3 bucket; the
token store uses the test clock so expiry can be exercised without sleeping.
"""

import io

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from database import get_db
from dependencies import get_object_storage, get_token_store
from domain.editing import DownloadTokenStore
from infrastructure.storage import S3StorageAdapter
from main import create_app

TEST_BUCKET = "test-applicant-documents"
TEST_REGION = "us-east-1"

PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\ntest document\n"


@pytest.fixture
def storage():
    with mock_aws():
        boto3.client("s3", region_name=TEST_REGION).create_bucket(Bucket=TEST_BUCKET)
        yield S3StorageAdapter(
            endpoint_url=None,
            access_key="testing",
            secret_key="testing",
            bucket_name=TEST_BUCKET,
            region=TEST_REGION,
        )


@pytest.fixture
def token_store(clock):
    return DownloadTokenStore(clock=clock, ttl_seconds=3600)


@pytest.fixture
def client(db_session, storage, token_store):
    app = create_app()

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_storage] = lambda: storage
    app.dependency_overrides[get_token_store] = lambda: token_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def pdf():
    """Factory for multipart file tuples."""

    def _make(name: str = "document.pdf", content: bytes = PDF_BYTES, mime: str = "application/pdf"):
        return (name, io.BytesIO(content), mime)

    return _make


@pytest.fixture
def applicant_form():
    return {
        "email": "alice@example.com",
        "full_name": "Alice Example",
        "phone": "+1 555 0100",
        "age": "29",
        "gender": "female",
        "marital_status": "single",
        "country": "Kenya",
        "visa_type": "work",
        "preferred_country": "Canada",
        "preferred_job": "Nurses",
    }
