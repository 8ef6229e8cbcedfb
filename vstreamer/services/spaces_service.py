"""DigitalOcean Spaces storage for video files, thumbnails and channel logos."""
from __future__ import annotations

import logging
import os
import re
import uuid
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, cast
from urllib.parse import urlparse

from boto3.session import Session
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from ..security.secrets import MissingSecretError, is_placeholder, require_secret

logger = logging.getLogger(__name__)

VIDEO_FOLDER = "videos"
THUMBNAIL_FOLDER = "thumbnails"
LOGO_FOLDER = "logos"


@dataclass(frozen=True)
class SpacesConfig:
    """Runtime configuration extracted from environment variables."""

    key: str
    secret: str
    region: str
    bucket: str
    api_endpoint: str
    public_endpoint: str


@dataclass(frozen=True)
class StoredObject:
    """Location of an object written to Spaces."""

    url: str
    key: str
    bucket: str
    content_type: str


class SpacesConfigurationError(RuntimeError):
    """Raised when required DigitalOcean Spaces settings are missing or invalid."""


class SpacesUploadError(RuntimeError):
    """Raised when an upload to DigitalOcean Spaces fails."""


class SpacesDeletionError(RuntimeError):
    """Raised when deleting an object from DigitalOcean Spaces fails."""


@lru_cache(maxsize=1)
def load_spaces_config() -> SpacesConfig:
    """Read and validate DigitalOcean Spaces configuration from the environment."""

    required: dict[str, str | None] = {
        "DO_SPACES_KEY": os.getenv("DO_SPACES_KEY"),
        "DO_SPACES_SECRET": os.getenv("DO_SPACES_SECRET"),
        "DO_SPACES_REGION": os.getenv("DO_SPACES_REGION"),
        "DO_SPACES_NAME": os.getenv("DO_SPACES_NAME"),
        "DO_SPACES_ENDPOINT": os.getenv("DO_SPACES_ENDPOINT"),
    }

    missing = [name for name, value in required.items() if not value or not value.strip()]
    if missing:
        raise SpacesConfigurationError(
            "Missing required DigitalOcean Spaces configuration: " + ", ".join(sorted(missing))
        )

    try:
        key = require_secret("DO_SPACES_KEY")
        secret = require_secret("DO_SPACES_SECRET")
    except MissingSecretError as exc:
        raise SpacesConfigurationError(str(exc)) from exc

    region = cast(str, required["DO_SPACES_REGION"]).strip()
    bucket = cast(str, required["DO_SPACES_NAME"]).strip()
    endpoint_raw = cast(str, required["DO_SPACES_ENDPOINT"]).strip()

    if is_placeholder(region):
        raise SpacesConfigurationError("DO_SPACES_REGION must be set to a valid region identifier")
    if is_placeholder(bucket):
        raise SpacesConfigurationError("DO_SPACES_NAME must be set to the target bucket name")

    public_endpoint = endpoint_raw.rstrip("/")
    parsed = urlparse(public_endpoint)
    if not parsed.scheme:
        public_endpoint = f"https://{public_endpoint.lstrip(':/')}"
        parsed = urlparse(public_endpoint)

    host = parsed.netloc or parsed.path
    if not host:
        raise SpacesConfigurationError("DO_SPACES_ENDPOINT must include a hostname.")
    if not host.endswith(".digitaloceanspaces.com"):
        raise SpacesConfigurationError("DO_SPACES_ENDPOINT must point to a *.digitaloceanspaces.com hostname.")

    return SpacesConfig(
        key=key,
        secret=secret,
        region=region,
        bucket=bucket,
        api_endpoint=f"https://{region}.digitaloceanspaces.com",
        public_endpoint=parsed.geturl().rstrip("/"),
    )


@lru_cache(maxsize=1)
def get_spaces_client() -> BaseClient:
    """Create a singleton boto3 client for Spaces interactions."""

    config = load_spaces_config()
    session = Session()
    return session.client(
        "s3",
        region_name=config.region,
        endpoint_url=config.api_endpoint,
        aws_access_key_id=config.key,
        aws_secret_access_key=config.secret,
    )


def _sanitize_segments(parts: Iterable[str]) -> list[str]:
    sanitized: list[str] = []
    for part in parts:
        if part in {"", ".", ".."}:
            continue
        cleaned = re.sub(r"[^A-Za-z0-9._-]", "-", part.strip())
        cleaned = re.sub(r"-+", "-", cleaned).strip("-._")
        if cleaned:
            sanitized.append(cleaned)
    return sanitized


def object_key(filename: str | None, folder: str) -> str:
    """Generate a unique object key inside ``folder`` keeping a safe file extension."""

    extension = Path(filename or "").suffix.lower()
    if extension and not re.fullmatch(r"\.[A-Za-z0-9]{1,10}", extension):
        extension = ""

    safe_folder = "/".join(_sanitize_segments((folder or "uploads").replace("\\", "/").split("/"))) or "uploads"
    return f"{safe_folder}/{uuid.uuid4().hex}{extension}"


def build_public_url(key: str) -> str:
    config = load_spaces_config()
    normalized_key = key.lstrip("/")
    endpoint = config.public_endpoint.rstrip("/")
    return f"{endpoint}/{normalized_key}" if normalized_key else endpoint


async def upload_file_to_spaces(
    file: UploadFile,
    *,
    folder: str,
    client: BaseClient | None = None,
) -> StoredObject:
    """Upload an ``UploadFile`` to Spaces and return where it landed."""

    config = load_spaces_config()
    s3_client = client or get_spaces_client()
    key = object_key(file.filename, folder)
    content_type = (file.content_type or "application/octet-stream").strip() or "application/octet-stream"
    file_obj = getattr(file, "file", None)
    if file_obj is None:
        raise SpacesUploadError("UploadFile is missing an underlying file buffer.")

    def _upload() -> None:
        try:
            file_obj.seek(0)
            s3_client.upload_fileobj(
                file_obj,
                config.bucket,
                key,
                ExtraArgs={"ACL": "public-read", "ContentType": content_type},
            )
        except (ClientError, BotoCoreError) as exc:  # pragma: no cover - network bound
            logger.exception("Upload of %s to DigitalOcean Spaces failed", key)
            raise SpacesUploadError("Upload to DigitalOcean Spaces failed") from exc

    await run_in_threadpool(_upload)
    logger.info("Stored %s (%s) in bucket %s", key, content_type, config.bucket)

    return StoredObject(url=build_public_url(key), key=key, bucket=config.bucket, content_type=content_type)


def delete_file_from_spaces(key: str | None, *, client: BaseClient | None = None) -> None:
    """Remove an object from DigitalOcean Spaces; empty keys are ignored."""

    if not key:
        return

    config = load_spaces_config()
    normalized_key = key.lstrip("/")
    s3_client = client or get_spaces_client()

    try:
        s3_client.delete_object(Bucket=config.bucket, Key=normalized_key)
    except (ClientError, BotoCoreError) as exc:  # pragma: no cover - network bound
        logger.exception("Failed to delete Spaces object %s", normalized_key)
        raise SpacesDeletionError("Unable to delete media from storage") from exc


__all__ = [
    "LOGO_FOLDER",
    "THUMBNAIL_FOLDER",
    "VIDEO_FOLDER",
    "SpacesConfig",
    "SpacesConfigurationError",
    "SpacesDeletionError",
    "SpacesUploadError",
    "StoredObject",
    "build_public_url",
    "delete_file_from_spaces",
    "get_spaces_client",
    "load_spaces_config",
    "object_key",
    "upload_file_to_spaces",
]
