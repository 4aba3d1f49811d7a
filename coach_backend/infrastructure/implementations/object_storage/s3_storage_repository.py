"""S3 implementation of ObjectStorageRepository."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from coach_backend.config import settings
from coach_backend.domain.errors import CheckInError
from coach_backend.domain.object_storage.repo import ObjectStorageRepository

logger = logging.getLogger(__name__)


class S3StorageRepository(ObjectStorageRepository):
    """Uploads objects with boto3 and returns their public URL."""

    def __init__(self, bucket: Optional[str] = None, region: Optional[str] = None,
                 public_base_url: Optional[str] = None, client=None) -> None:
        cfg = settings()
        self._bucket = bucket or cfg.s3_bucket
        self._region = region or cfg.aws_region
        self._public_base_url = public_base_url or cfg.s3_public_base_url
        self._client = client or boto3.client("s3", region_name=self._region)

    def public_url(self, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url.rstrip('/')}/{quote(key)}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{quote(key)}"

    async def upload(self, content: bytes, content_type: str, key: str) -> str:
        # boto3 is blocking; keep it off the event loop
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: self._client.put_object(
                    Bucket=self._bucket,
                    Key=key,
                    Body=content,
                    ContentType=content_type,
                )
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload failed for {key}: {e}")
            raise CheckInError.storage("Error uploading file to storage") from e

        logger.info(f"Uploaded {len(content)} bytes to s3://{self._bucket}/{key}")
        return self.public_url(key)
