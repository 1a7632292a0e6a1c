# shared_lib/s3.py
import asyncio
import json
import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class UploadFailed(Exception):
    """Raised when a file could not be stored."""


@dataclass
class UploadResult:
    url: str
    key: str
    duration: Optional[float] = None


class BlobStorage:
    """Uploads local files to an S3 bucket and returns their public URL."""

    def __init__(
        self,
        bucket_name: str,
        region: str = "us-east-1",
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_url: Optional[str] = None,
        ffprobe_path: str = "ffprobe",
    ):
        self.s3 = boto3.client(
            "s3",
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
            region_name=region,
            endpoint_url=endpoint_url or None,
        )
        self.bucket_name = bucket_name
        self.public_url = (public_url or f"https://{bucket_name}.s3.{region}.amazonaws.com").rstrip("/")
        self.ffprobe_path = ffprobe_path

    async def upload(self, local_path: str, folder: str = "media") -> UploadResult:
        """
        Upload a local file and delete it afterwards.

        Video files are probed for their duration before upload; the probe is
        best-effort and leaves ``duration`` as None when ffprobe is missing.
        """
        if not local_path or not os.path.exists(local_path):
            raise UploadFailed(f"File not found: {local_path}")

        content_type = mimetypes.guess_type(local_path)[0] or "application/octet-stream"
        extension = os.path.splitext(local_path)[1]
        key = f"{folder}/{uuid4().hex}{extension}"

        try:
            duration = None
            if content_type.startswith("video/"):
                duration = await self.probe_duration(local_path)

            await asyncio.to_thread(
                self.s3.upload_file,
                local_path,
                self.bucket_name,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Upload of {local_path} to bucket {self.bucket_name} failed: {e}")
            raise UploadFailed(str(e)) from e
        finally:
            try:
                os.remove(local_path)
            except OSError:
                logger.warning(f"Could not remove temporary upload {local_path}")

        return UploadResult(url=f"{self.public_url}/{key}", key=key, duration=duration)

    async def probe_duration(self, local_path: str) -> Optional[float]:
        """Return the media duration in seconds using ffprobe."""
        cmd = [
            self.ffprobe_path,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            local_path,
        ]
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except FileNotFoundError:
            logger.warning(f"ffprobe not available at {self.ffprobe_path}, duration unknown")
            return None

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            logger.warning(f"ffprobe failed for {local_path}: {stderr.decode(errors='ignore')}")
            return None

        try:
            probe_data = json.loads(stdout.decode())
            return float(probe_data.get("format", {}).get("duration", 0))
        except (ValueError, TypeError):
            return None
