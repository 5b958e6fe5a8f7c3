"""S3 Storage Adapter - Implementation of ObjectStoragePort using boto3.

Stores applicant documents, job offers, contracts and editing deliverables
in one S3-compatible bucket (AWS S3, MinIO).

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import hashlib
import logging
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from domain.documents.ports.object_storage_port import (
    ObjectStoragePort,
    StoredFile,
)

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class S3StorageAdapter(ObjectStoragePort):
    """S3-compatible storage adapter using boto3.

    Features:
    - SHA256-based deduplication (per applicant and kind)
    - Storage key format: {email}/{kind}/{sha256}{ext}
    - Prefix deletion so an applicant's files go away with the record

    Example:
        config = load_storage_config(get_settings())
        storage = S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )
    """

    CHUNK_SIZE = 8192

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
    ):
        """Initialize S3 storage adapter.

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
            self.bucket_name = bucket_name
            self.region = region

            logger.info(
                f"Initialized S3 storage adapter: bucket={bucket_name}, "
                f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    async def store_file(
        self,
        file: BinaryIO,
        owner: str,
        kind: str,
        filename: str,
        mime_type: str,
    ) -> StoredFile:
        """Store a file under {owner}/{kind}/, skipping the upload if the same
        content is already stored there.

        Raises:
            StorageError: If upload fails
            ValueError: If file is empty
        """
        sha256_hash = hashlib.sha256()
        chunks = []
        size_bytes = 0

        while True:
            chunk = file.read(self.CHUNK_SIZE)
            if not chunk:
                break
            sha256_hash.update(chunk)
            chunks.append(chunk)
            size_bytes += len(chunk)

        if size_bytes == 0:
            raise ValueError("Cannot store empty file")

        sha256_hex = sha256_hash.hexdigest()
        storage_key = self.build_storage_key(owner=owner, kind=kind, sha256=sha256_hex, filename=filename)
        stored = StoredFile(
            storage_key=storage_key,
            sha256=sha256_hex,
            size_bytes=size_bytes,
            mime_type=mime_type,
        )

        if await self.file_exists(storage_key):
            logger.info(f"File already exists (dedup): storage_key={storage_key}, size={size_bytes}")
            return stored

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=BytesIO(b"".join(chunks)),
                ContentType=mime_type,
                Metadata={
                    "sha256": sha256_hex,
                    "kind": kind,
                },
            )
            logger.info(
                f"Uploaded file: storage_key={storage_key}, "
                f"size={size_bytes}, mime_type={mime_type}"
            )
            return stored

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"S3 upload failed: storage_key={storage_key}, error={error_code}")
            raise StorageError(f"Failed to upload file: {error_code}")

    async def retrieve_file(self, storage_key: str) -> BinaryIO:
        """Retrieve a file from S3. Caller must close the returned stream.

        Raises:
            FileNotFoundError: If file doesn't exist
            StorageError: If retrieval fails
        """
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=storage_key)
            logger.info(f"Retrieved file: storage_key={storage_key}")
            return response["Body"]

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("NoSuchKey", "404"):
                logger.warning(f"File not found: storage_key={storage_key}")
                raise FileNotFoundError(f"File not found: {storage_key}")
            logger.error(f"S3 retrieval failed: storage_key={storage_key}, error={error_code}")
            raise StorageError(f"Failed to retrieve file: {error_code}")

    async def delete_file(self, storage_key: str) -> bool:
        if not await self.file_exists(storage_key):
            logger.info(f"File not found for deletion: storage_key={storage_key}")
            return False

        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=storage_key)
            logger.info(f"Deleted file: storage_key={storage_key}")
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"S3 deletion failed: storage_key={storage_key}, error={error_code}")
            raise StorageError(f"Failed to delete file: {error_code}")

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every object under prefix, one listing page at a time."""
        deleted = 0
        try:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                objects = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
                if not objects:
                    continue
                self.s3_client.delete_objects(
                    Bucket=self.bucket_name,
                    Delete={"Objects": objects, "Quiet": True},
                )
                deleted += len(objects)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"S3 prefix deletion failed: prefix={prefix}, error={error_code}")
            raise StorageError(f"Failed to delete files: {error_code}")

        logger.info(f"Deleted {deleted} files under prefix={prefix}")
        return deleted

    async def file_exists(self, storage_key: str) -> bool:
        """HEAD the object. Only a 404 means missing; other failures raise.

        Raises:
            StorageError: If the backend cannot be reached
        """
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=storage_key)
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey", "NotFound"):
                return False
            logger.warning(f"Error checking file existence: storage_key={storage_key}, error={error_code}")
            raise StorageError(f"Failed to check file: {error_code}")

    @staticmethod
    def build_storage_key(owner: str, kind: str, sha256: str, filename: str) -> str:
        """Build storage key in format: {owner}/{kind}/{sha256}{ext}

        Example:
            >>> S3StorageAdapter.build_storage_key(
            ...     'alice@example.com', 'passport', 'abc123', 'Passport.PDF')
            'alice@example.com/passport/abc123.pdf'
        """
        ext = Path(filename).suffix.lower()
        return f"{owner}/{kind}/{sha256}{ext}"

    async def verify_bucket_exists(self) -> bool:
        """Fail fast on startup if the configured bucket is missing.

        Raises:
            StorageError: If bucket check fails or bucket doesn't exist
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            logger.info(f"Verified bucket exists: {self.bucket_name}")
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "404":
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update S3_BUCKET_NAME."
                )
            raise StorageError(f"Failed to verify bucket: {error_code}")
