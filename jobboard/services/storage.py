# jobboard/services/storage.py
import logging
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile

from jobboard.core.config import settings
from jobboard.core.errors import ValidationError

logger = logging.getLogger(__name__)

CV_FOLDER = "cvs"
IMAGE_FOLDER = "images"

CV_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
CV_EXTENSIONS = {".pdf", ".doc", ".docx"}


def _get_s3_client():
    """
    Return a boto3 S3 client for AWS, Cloudflare R2 or MinIO.
    If no bucket or credentials are configured, returns None.
    """
    if not settings.S3_BUCKET or not settings.S3_ACCESS_KEY or not settings.S3_SECRET_KEY:
        return None
    # Use signature s3v4 for compatibility (Cloudflare R2 & MinIO)
    return boto3.client(
        "s3",
        endpoint_url=str(settings.S3_ENDPOINT) if settings.S3_ENDPOINT else None,
        aws_access_key_id=settings.S3_ACCESS_KEY,
        aws_secret_access_key=settings.S3_SECRET_KEY,
        config=Config(signature_version="s3v4"),
        region_name=(settings.S3_REGION or None),
    )


def local_upload_dir() -> Path:
    return Path(settings.UPLOAD_DIR)


def _object_url(s3, key: str) -> str:
    if settings.S3_PUBLIC_URL:
        return f"{settings.S3_PUBLIC_URL.rstrip('/')}/{key}"
    return s3.generate_presigned_url(
        "get_object",
        Params={"Bucket": settings.S3_BUCKET, "Key": key},
        ExpiresIn=settings.S3_PRESIGN_EXPIRES_SEC,
    )


async def _read_checked(file: Optional[UploadFile], field: str, max_bytes: int) -> bytes:
    if file is None or not file.filename:
        raise ValidationError.for_field(field, "Please upload a file")
    contents = await file.read()
    if not contents:
        raise ValidationError.for_field(field, "Uploaded file is empty")
    if len(contents) > max_bytes:
        raise ValidationError.for_field(field, f"File size cannot exceed {max_bytes // (1024 * 1024)}MB")
    return contents


async def store_bytes(contents: bytes, filename: str, content_type: Optional[str], folder: str) -> str:
    """
    Store an already validated upload and return a URL it can be fetched from.
    Tries the configured S3-compatible bucket first, then the local upload dir.
    """
    ext = Path(filename or "").suffix.lower()
    key = f"{folder}/{uuid.uuid4().hex}{ext}"

    s3 = _get_s3_client()
    if s3:
        try:
            s3.put_object(
                Bucket=settings.S3_BUCKET,
                Key=key,
                Body=contents,
                ContentType=content_type or "application/octet-stream",
            )
            return _object_url(s3, key)
        except (BotoCoreError, ClientError):
            logger.exception("S3 upload of %s failed, falling back to local storage", key)

    # Fallback: local filesystem, served under UPLOAD_URL_PREFIX
    local_path = local_upload_dir() / key
    local_path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(local_path, "wb") as out:
        await out.write(contents)
    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{key}"


async def store_cv(file: Optional[UploadFile], field: str = "cv") -> str:
    """Accept PDF/DOC/DOCX (matched by MIME type or extension) up to CV_MAX_BYTES."""
    contents = await _read_checked(file, field, settings.CV_MAX_BYTES)
    ext = Path(file.filename).suffix.lower()
    if (file.content_type or "").lower() not in CV_MIME_TYPES and ext not in CV_EXTENSIONS:
        raise ValidationError.for_field(field, "Only PDF, DOC, and DOCX files are allowed for CV")
    return await store_bytes(contents, file.filename, file.content_type, CV_FOLDER)


async def store_image(file: Optional[UploadFile], field: str = "photo") -> str:
    contents = await _read_checked(file, field, settings.IMAGE_MAX_BYTES)
    if not (file.content_type or "").lower().startswith("image/"):
        raise ValidationError.for_field(field, "Only image files are allowed")
    return await store_bytes(contents, file.filename, file.content_type, IMAGE_FOLDER)
