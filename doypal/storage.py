"""Object storage for reward images."""

from __future__ import annotations

import logging
import secrets
import string
import time
from abc import ABC, abstractmethod
from pathlib import Path

import boto3
from botocore.config import Config

from doypal.config import Settings

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 1024 * 1024
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}

_ALPHABET = string.ascii_lowercase + string.digits


def build_image_name(filename: str | None) -> str:
    """``reward-<millis>-<rand6>.<ext>``, keeping the uploaded extension."""
    extension = "jpg"
    if filename and "." in filename:
        extension = filename.rsplit(".", 1)[-1].lower() or "jpg"
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"reward-{int(time.time() * 1000)}-{suffix}.{extension}"


def name_from_url(url: str | None) -> str | None:
    if not url:
        return None
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return name or None


class ImageStorage(ABC):
    @abstractmethod
    def upload(self, name: str, payload: bytes, content_type: str) -> str:
        """Store the object and return its public URL."""

    @abstractmethod
    def remove(self, name: str) -> None:
        ...


class LocalImageStorage(ImageStorage):
    def __init__(self, root: str | Path, bucket: str, public_base_url: str):
        self._directory = Path(root) / bucket
        self._public_base_url = f"{public_base_url.rstrip('/')}/{bucket}"

    def upload(self, name: str, payload: bytes, content_type: str) -> str:
        self._directory.mkdir(parents=True, exist_ok=True)
        (self._directory / name).write_bytes(payload)
        return f"{self._public_base_url}/{name}"

    def remove(self, name: str) -> None:
        (self._directory / name).unlink(missing_ok=True)


class S3ImageStorage(ImageStorage):
    def __init__(self, settings: Settings, client=None):
        self._bucket = settings.reward_images_bucket
        self._public_base_url = settings.reward_images_public_base_url.rstrip("/")
        self._client = client or boto3.client(
            "s3",
            region_name=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            config=Config(s3={"addressing_style": "path"}),
        )

    def upload(self, name: str, payload: bytes, content_type: str) -> str:
        self._client.put_object(
            Bucket=self._bucket,
            Key=name,
            Body=payload,
            ContentType=content_type,
        )
        return f"{self._public_base_url}/{name}"

    def remove(self, name: str) -> None:
        self._client.delete_object(Bucket=self._bucket, Key=name)


def build_image_storage(settings: Settings) -> ImageStorage:
    if settings.storage_backend == "s3":
        return S3ImageStorage(settings)
    return LocalImageStorage(
        settings.reward_images_dir,
        settings.reward_images_bucket,
        settings.reward_images_public_base_url,
    )
