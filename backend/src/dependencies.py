"""FastAPI dependencies wiring services to their adapters.

Tests override get_object_storage, get_token_store and the repository
dependencies through app.dependency_overrides.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from applications.service import ApplicationService
from config import Settings, get_settings
from database import get_db
from domain.applications import ApplicationStatusEngine, utc_now
from domain.applications.ports import ApplicationRepositoryPort
from domain.documents.ports import ObjectStoragePort
from domain.editing import DownloadTokenStore
from domain.editing.ports import EditingRepositoryPort
from editing.service import EditingService
from infrastructure.locking import RecordLocks
from infrastructure.repositories import SqlApplicationRepository, SqlEditingRepository
from infrastructure.storage import S3StorageAdapter, load_storage_config


@lru_cache()
def get_object_storage() -> ObjectStoragePort:
    """Process-wide S3 adapter built from settings."""
    config = load_storage_config(get_settings())
    return S3StorageAdapter(
        endpoint_url=config.endpoint_url,
        access_key=config.access_key,
        secret_key=config.secret_key,
        bucket_name=config.bucket_name,
        region=config.region,
    )


@lru_cache()
def get_token_store() -> DownloadTokenStore:
    """Process-wide download token store (shared with the sweeper task)."""
    return DownloadTokenStore(clock=utc_now, ttl_seconds=get_settings().DOWNLOAD_TOKEN_TTL_SECONDS)


@lru_cache()
def get_record_locks() -> RecordLocks:
    """Process-wide per-email locks shared by every service instance."""
    return RecordLocks()


def get_application_repository(db: Session = Depends(get_db)) -> ApplicationRepositoryPort:
    return SqlApplicationRepository(db)


def get_editing_repository(db: Session = Depends(get_db)) -> EditingRepositoryPort:
    return SqlEditingRepository(db)


def get_application_service(
    repository: ApplicationRepositoryPort = Depends(get_application_repository),
    storage: ObjectStoragePort = Depends(get_object_storage),
    settings: Settings = Depends(get_settings),
    locks: RecordLocks = Depends(get_record_locks),
) -> ApplicationService:
    engine = ApplicationStatusEngine(max_uploads=settings.MAX_UPLOADS)
    return ApplicationService(repository, storage, engine, locks)


def get_editing_service(
    repository: EditingRepositoryPort = Depends(get_editing_repository),
    storage: ObjectStoragePort = Depends(get_object_storage),
    tokens: DownloadTokenStore = Depends(get_token_store),
    locks: RecordLocks = Depends(get_record_locks),
) -> EditingService:
    return EditingService(repository, storage, tokens, locks=locks)


def get_reviewer(x_admin_user: Optional[str] = Header(None, alias="X-Admin-User")) -> str:
    """Reviewer identity for admin endpoints (authentication is handled upstream)."""
    return (x_admin_user or "").strip() or "admin"
