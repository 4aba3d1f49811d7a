"""Tests for the S3 object storage adapter with a stubbed boto3 client."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from coach_backend.domain.errors import CheckInError, ErrorKind
from coach_backend.infrastructure.implementations.object_storage.s3_storage_repository import (
    S3StorageRepository,
)


@pytest.mark.asyncio
async def test_upload_puts_object_and_returns_public_url():
    client = MagicMock()
    storage = S3StorageRepository(bucket="photos", region="eu-west-1", client=client)

    url = await storage.upload(b"jpeg-bytes", "image/jpeg", "progress-photos/u/c/week-1/1-front.jpg")

    client.put_object.assert_called_once_with(
        Bucket="photos",
        Key="progress-photos/u/c/week-1/1-front.jpg",
        Body=b"jpeg-bytes",
        ContentType="image/jpeg",
    )
    assert url == "https://photos.s3.eu-west-1.amazonaws.com/progress-photos/u/c/week-1/1-front.jpg"


def test_public_url_uses_configured_base():
    storage = S3StorageRepository(
        bucket="photos", region="eu-west-1", public_base_url="https://cdn.example.com/", client=MagicMock()
    )
    assert storage.public_url("a/b c.jpg") == "https://cdn.example.com/a/b%20c.jpg"


@pytest.mark.asyncio
async def test_client_error_is_storage_failure():
    client = MagicMock()
    client.put_object.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
    )
    storage = S3StorageRepository(bucket="photos", region="eu-west-1", client=client)

    with pytest.raises(CheckInError) as exc_info:
        await storage.upload(b"x", "image/png", "k.png")

    assert exc_info.value.kind is ErrorKind.STORAGE_FAILURE
    assert exc_info.value.message == "Error uploading file to storage"
