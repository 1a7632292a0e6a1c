import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from shared_lib.s3 import BlobStorage, UploadFailed


@pytest.fixture
def storage():
    with patch("shared_lib.s3.boto3.client") as client_factory:
        client_factory.return_value = MagicMock()
        yield BlobStorage(
            "test-bucket",
            region="eu-west-1",
            public_url="https://cdn.test/",
            ffprobe_path="/nonexistent/ffprobe",
        )


class TestBlobStorage:

    async def test_upload_image(self, storage, tmp_path):
        local = tmp_path / "avatar.png"
        local.write_bytes(b"\x89PNG\r\n")

        result = await storage.upload(str(local), folder="avatars")

        assert result.key.startswith("avatars/")
        assert result.key.endswith(".png")
        assert result.url == f"https://cdn.test/{result.key}"
        assert result.duration is None
        storage.s3.upload_file.assert_called_once()
        assert storage.s3.upload_file.call_args.kwargs["ExtraArgs"] == {"ContentType": "image/png"}
        assert not os.path.exists(local)

    async def test_video_duration_is_probed(self, storage, tmp_path):
        local = tmp_path / "clip.mp4"
        local.write_bytes(b"\x00")

        with patch.object(storage, "probe_duration", AsyncMock(return_value=12.5)):
            result = await storage.upload(str(local), folder="videos")

        assert result.duration == 12.5

    async def test_missing_ffprobe_gives_unknown_duration(self, storage, tmp_path):
        local = tmp_path / "clip.mp4"
        local.write_bytes(b"\x00")

        assert await storage.probe_duration(str(local)) is None

    async def test_client_error_becomes_upload_failed(self, storage, tmp_path):
        local = tmp_path / "thumb.png"
        local.write_bytes(b"\x89PNG\r\n")
        storage.s3.upload_file.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )

        with pytest.raises(UploadFailed):
            await storage.upload(str(local), folder="thumbnails")

        assert not os.path.exists(local)

    async def test_missing_file(self, storage):
        with pytest.raises(UploadFailed):
            await storage.upload("/does/not/exist.png")

    def test_default_public_url(self):
        with patch("shared_lib.s3.boto3.client"):
            storage = BlobStorage("media", region="us-east-1")
        assert storage.public_url == "https://media.s3.us-east-1.amazonaws.com"
