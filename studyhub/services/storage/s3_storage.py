"""
AWS S3 storage adapter implementing FileStorageInterface.
Stores files in AWS S3 (or an S3-compatible service) for production deployments.
"""
import asyncio
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from .base import FileStorageInterface
from ...core.config import S3_URL_EXPIRES_IN


class S3FileStorage(FileStorageInterface):
    """
    AWS S3 storage adapter.

    boto3 is synchronous, so every call runs in the default executor.
    """

    def __init__(
        self,
        bucket_name: str,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region_name: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        url_expires_in: int = S3_URL_EXPIRES_IN,
    ):
        self.bucket_name = bucket_name
        self.url_expires_in = url_expires_in
        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region_name,
            endpoint_url=endpoint_url,
            config=Config(signature_version="s3v4", retries={"max_attempts": 3}),
        )

    async def _run(self, fn, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))

    async def initialize(self):
        """Verify the bucket exists and is accessible."""
        try:
            await self._run(self.s3_client.head_bucket, Bucket=self.bucket_name)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "404":
                raise ValueError(f"S3 bucket '{self.bucket_name}' does not exist") from e
            elif error_code == "403":
                raise ValueError(f"Access denied to S3 bucket '{self.bucket_name}'") from e
            raise ValueError(f"Error accessing S3 bucket: {e}") from e

    async def close(self):
        pass

    async def save_bytes(self, data: bytes, key: str, content_type: Optional[str] = None) -> str:
        await self._run(
            self.s3_client.put_object,
            Bucket=self.bucket_name,
            Key=key,
            Body=data,
            ContentType=content_type or "application/octet-stream",
        )
        return key

    async def get_file(self, key: str) -> bytes:
        def _download():
            try:
                response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
                return response["Body"].read()
            except ClientError as e:
                if e.response["Error"]["Code"] == "NoSuchKey":
                    raise FileNotFoundError(f"File not found in S3: {key}") from e
                raise

        return await self._run(_download)

    async def delete_file(self, key: str) -> bool:
        if not await self.file_exists(key):
            return False
        await self._run(self.s3_client.delete_object, Bucket=self.bucket_name, Key=key)
        return True

    async def file_exists(self, key: str) -> bool:
        def _check():
            try:
                self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
                return True
            except ClientError as e:
                if e.response["Error"]["Code"] in ("404", "NoSuchKey"):
                    return False
                raise

        return await self._run(_check)

    async def get_file_url(self, key: str, expires_in: Optional[int] = None) -> str:
        """Presigned GET URL, valid for ``expires_in`` seconds (S3_URL_EXPIRES_IN by default)."""
        return await self._run(
            self.s3_client.generate_presigned_url,
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": key},
            ExpiresIn=expires_in or self.url_expires_in,
        )
