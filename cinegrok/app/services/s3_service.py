"""
S3 upload service for profile photos, posters and other media.
Stores files under {s3_key_prefix}/{path}/{filename}.
"""
import re
import uuid

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cinegrok.app.core.config import settings
from cinegrok.app.core.logging_config import get_logger

logger = get_logger("services.s3")

_SAFE_SEGMENT = re.compile(r"[^A-Za-z0-9._-]+")


def is_configured() -> bool:
    return bool(settings.aws_access_key_id and settings.aws_secret_access_key)


def _get_s3_client():
    """Get configured S3 client."""
    if not is_configured():
        raise ValueError("AWS credentials not configured (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)")
    return boto3.client(
        "s3",
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region,
    )


def build_key(file_name: str, path: str | None = None) -> str:
    """Prefix + sanitised path segments + a unique file name that keeps the extension."""
    segments = [settings.s3_key_prefix]
    for part in (path or "").split("/"):
        part = _SAFE_SEGMENT.sub("-", part.strip()).strip("-.")
        if part:
            segments.append(part)
    ext = ""
    if "." in (file_name or ""):
        ext = "." + _SAFE_SEGMENT.sub("", file_name.rsplit(".", 1)[1].lower())[:10]
    segments.append(f"{uuid.uuid4().hex}{ext if ext != '.' else ''}")
    return "/".join(segments)


def public_url(bucket: str, key: str) -> str:
    return f"https://{bucket}.s3.{settings.aws_region}.amazonaws.com/{key}"


def upload_file_to_s3(
    file_buffer: bytes,
    file_name: str,
    path: str | None = None,
    bucket: str | None = None,
    mime_type: str = "application/octet-stream",
) -> dict:
    """
    Upload file to S3.

    Args:
        file_buffer: File content as bytes
        file_name: Original filename (only the extension is kept)
        path: Optional sub-folder, e.g. "profile-photos" or "posters/<id>"
        bucket: Bucket override (default: aws_bucket_name)
        mime_type: Content type

    Returns:
        dict with key, url
    """
    bucket_name = bucket or settings.aws_bucket_name
    key = build_key(file_name, path)

    logger.info(
        "S3 upload started bucket=%s region=%s key=%s file_name=%s size_bytes=%d",
        bucket_name,
        settings.aws_region,
        key,
        file_name,
        len(file_buffer),
    )

    s3 = _get_s3_client()
    try:
        s3.put_object(
            Bucket=bucket_name,
            Key=key,
            Body=file_buffer,
            ContentType=mime_type,
        )
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "")
        msg = e.response.get("Error", {}).get("Message", str(e))
        logger.error(
            "S3 upload failed bucket=%s key=%s error_code=%s error_message=%s",
            bucket_name,
            key,
            code,
            msg,
        )
        raise RuntimeError(f"S3 upload failed - {code}: {msg}") from e
    except BotoCoreError as e:
        logger.error("S3 upload failed bucket=%s key=%s error=%s", bucket_name, key, e)
        raise RuntimeError(f"S3 upload failed - {e}") from e

    url = public_url(bucket_name, key)
    logger.info("S3 upload success bucket=%s key=%s url=%s", bucket_name, key, url)
    return {"key": key, "url": url}
