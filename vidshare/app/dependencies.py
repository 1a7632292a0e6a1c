"""
Application-wide dependencies for FastAPI.
"""
import logging
import os
from functools import lru_cache
from typing import Optional
from uuid import uuid4

import aiofiles
from fastapi import UploadFile

from shared_lib.s3 import BlobStorage
from shared_lib.utils import sanitize_filename
from .config import get_settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_blob_storage() -> BlobStorage:
    settings = get_settings()
    return BlobStorage(
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
        access_key_id=settings.S3_ACCESS_KEY_ID,
        secret_access_key=settings.S3_SECRET_ACCESS_KEY,
        endpoint_url=settings.S3_ENDPOINT_URL,
        public_url=settings.S3_PUBLIC_URL,
        ffprobe_path=settings.FFPROBE_PATH,
    )


async def save_upload(file: Optional[UploadFile]) -> Optional[str]:
    """
    Spool an uploaded file to the temp directory and return its path.

    Returns None when no file (or an empty one) was sent. The blob storage
    removes the temp file once it has been uploaded; callers pass the path to
    ``discard_uploads`` in a ``finally`` block for requests that fail first.
    """
    if file is None or not file.filename:
        return None

    temp_dir = get_settings().UPLOAD_TEMP_DIR
    os.makedirs(temp_dir, exist_ok=True)
    file_path = os.path.join(temp_dir, f"{uuid4().hex}-{sanitize_filename(file.filename)}")

    async with aiofiles.open(file_path, 'wb') as out_file:
        content = await file.read()
        await out_file.write(content)

    if os.path.getsize(file_path) == 0:
        os.remove(file_path)
        return None
    return file_path


def discard_uploads(*paths: Optional[str]) -> None:
    """Remove spooled files the blob storage did not consume."""
    for path in paths:
        if path and os.path.exists(path):
            try:
                os.remove(path)
            except OSError as e:
                logger.warning(f"Could not remove temp upload {path}: {e}")
