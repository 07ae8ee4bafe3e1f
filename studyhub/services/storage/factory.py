"""
Storage adapter selection.

STORAGE_TYPE picks the backend; local storage serves its objects back through
the API's /files/raw route, so its URLs are built from PUBLIC_BASE_URL.
"""
from pathlib import Path
from typing import Optional

from .base import FileStorageInterface
from .local_storage import LocalFileStorage
from .s3_storage import S3FileStorage
from ...core.config import (
    AWS_ACCESS_KEY_ID,
    AWS_REGION,
    AWS_SECRET_ACCESS_KEY,
    BASE_DIR,
    LOCAL_STORAGE_DIR,
    S3_BUCKET_NAME,
    S3_ENDPOINT_URL,
    STORAGE_TYPE,
)
from ...core.logging_config import get_logger

logger = get_logger(__name__)

SUPPORTED_STORAGE_TYPES = ("local", "s3")


class FileStorageFactory:
    """Builds the configured FileStorageInterface implementation."""

    @staticmethod
    def create(
        storage_type: Optional[str] = None,
        base_dir: Optional[Path] = None,
        public_base_url: Optional[str] = None,
        bucket_name: Optional[str] = None,
    ) -> FileStorageInterface:
        """
        Args:
            storage_type: 'local', 's3', or None for STORAGE_TYPE
            base_dir: Local root directory override
            public_base_url: Override for the host part of local download URLs
            bucket_name: S3 bucket override

        Raises:
            ValueError: Unknown storage type, or S3 without a bucket
        """
        storage_type = (storage_type or STORAGE_TYPE).lower()
        if storage_type not in SUPPORTED_STORAGE_TYPES:
            raise ValueError(
                f"Unsupported storage type '{storage_type}'. Use one of: {', '.join(SUPPORTED_STORAGE_TYPES)}"
            )

        if storage_type == "s3":
            bucket = bucket_name or S3_BUCKET_NAME
            if not bucket:
                raise ValueError("S3_BUCKET_NAME must be set when STORAGE_TYPE is 's3'")
            logger.info(f"Storing uploads in S3 bucket '{bucket}'")
            return S3FileStorage(
                bucket_name=bucket,
                aws_access_key_id=AWS_ACCESS_KEY_ID,
                aws_secret_access_key=AWS_SECRET_ACCESS_KEY,
                region_name=AWS_REGION,
                endpoint_url=S3_ENDPOINT_URL,
            )

        root = Path(base_dir or LOCAL_STORAGE_DIR or BASE_DIR / "uploads")
        logger.info(f"Storing uploads on disk under {root}")
        if public_base_url:
            return LocalFileStorage(base_dir=root, public_base_url=public_base_url)
        return LocalFileStorage(base_dir=root)

    @staticmethod
    async def create_and_initialize(storage_type: Optional[str] = None, **kwargs) -> FileStorageInterface:
        storage = FileStorageFactory.create(storage_type, **kwargs)
        await storage.initialize()
        return storage
