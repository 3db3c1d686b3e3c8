from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from rfp_slides.core.errors import StorageUnavailable
from rfp_slides.storage.archive import LocalUploadArchive, S3UploadArchive
from rfp_slides.storage.s3 import S3Service


class TestLocalUploadArchive:
    @pytest.mark.asyncio
    async def test_store_and_remove(self, tmp_path):
        source = tmp_path / "upload.pdf"
        source.write_bytes(b"%PDF-1.4")
        archive = LocalUploadArchive(str(tmp_path / "user_uploads"))
        await archive.initialize()

        location = await archive.store(source, "2024-05-01T10-20-30-123Z_specs.pdf")

        assert (tmp_path / "user_uploads" / "2024-05-01T10-20-30-123Z_specs.pdf").read_bytes() == b"%PDF-1.4"
        assert location.endswith("2024-05-01T10-20-30-123Z_specs.pdf")

        await archive.remove("2024-05-01T10-20-30-123Z_specs.pdf")
        await archive.remove("2024-05-01T10-20-30-123Z_specs.pdf")
        assert list((tmp_path / "user_uploads").iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_source(self, tmp_path):
        archive = LocalUploadArchive(str(tmp_path))

        with pytest.raises(StorageUnavailable):
            await archive.store(tmp_path / "gone.pdf", "x_gone.pdf")


class TestS3UploadArchive:
    @pytest.mark.asyncio
    async def test_delegates_to_s3(self, tmp_path):
        s3 = MagicMock(spec=S3Service)
        s3.initialize = AsyncMock()
        s3.upload_file = AsyncMock(return_value="s3://bucket/x_specs.pdf")
        s3.delete_file = AsyncMock()
        archive = S3UploadArchive(s3)

        await archive.initialize()
        location = await archive.store(tmp_path / "specs.pdf", "x_specs.pdf")
        await archive.remove("x_specs.pdf")

        assert location == "s3://bucket/x_specs.pdf"
        s3.upload_file.assert_awaited_once_with(tmp_path / "specs.pdf", "x_specs.pdf")
        s3.delete_file.assert_awaited_once_with("x_specs.pdf")


@pytest.fixture
def s3_client():
    return AsyncMock()


@pytest.fixture
def patched_session(monkeypatch, s3_client):
    session = MagicMock()
    session.client.return_value.__aenter__.return_value = s3_client
    monkeypatch.setattr("rfp_slides.storage.s3.aioboto3.Session", MagicMock(return_value=session))
    return session


class TestS3Service:
    @pytest.mark.asyncio
    async def test_initialize_checks_bucket(self, patched_session, s3_client):
        s3 = S3Service()
        await s3.initialize(bucket_name="rfp-uploads", region_name="eu-west-1")

        s3_client.head_bucket.assert_awaited_once_with(Bucket="rfp-uploads")

    @pytest.mark.asyncio
    async def test_missing_bucket_is_unavailable(self, patched_session, s3_client):
        s3_client.head_bucket.side_effect = ClientError({"Error": {"Code": "404"}}, "HeadBucket")

        with pytest.raises(StorageUnavailable):
            await S3Service().initialize(bucket_name="missing-bucket")

    @pytest.mark.asyncio
    async def test_upload_returns_s3_url(self, patched_session, s3_client, tmp_path):
        source = tmp_path / "specs.pdf"
        source.write_bytes(b"%PDF-1.4")
        s3 = S3Service()
        await s3.initialize(bucket_name="rfp-uploads")

        url = await s3.upload_file(source, "stamp_specs.pdf")

        assert url == "s3://rfp-uploads/stamp_specs.pdf"
        s3_client.upload_file.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_upload_requires_initialize(self, tmp_path):
        with pytest.raises(RuntimeError):
            await S3Service().upload_file(tmp_path / "specs.pdf", "stamp_specs.pdf")
