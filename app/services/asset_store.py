"""
Asset store adapter for property images.
Uploads image bytes to Cloudinary through its SDK and deletes them by URL.
"""

import asyncio
import io
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

import cloudinary
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.utils.exceptions import (
    ResourceLimitExceededError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+$")


@dataclass
class ImageUpload:
    """An uploaded image held in memory until it is sent to the asset store."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def extract_public_id(image_url: str) -> Optional[str]:
    """
    Derive the Cloudinary public id from a delivery URL.

    https://res.cloudinary.com/<cloud>/image/upload/v123/properties/abc.jpg
    -> properties/abc

    Returns:
        Public id, or None when the URL has no recognizable upload path
    """
    parts = image_url.split("?")[0].split("/")
    if "upload" not in parts:
        return None

    tail = [part for part in parts[parts.index("upload") + 1:] if part]
    if tail and _VERSION_SEGMENT.match(tail[0]):
        tail = tail[1:]
    if not tail:
        return None

    return re.sub(r"\.[^/.]+$", "", "/".join(tail))


class AssetStore:
    """
    Interface for image storage.
    Uploads never raise: a failed or timed-out upload yields None.
    Deletes are best-effort.
    """

    def __init__(self, settings: Settings):
        self.max_images = settings.max_images_per_property
        self.max_file_size = settings.max_image_size
        self.allowed_types = list(settings.allowed_image_types)
        self.upload_timeout = settings.asset_upload_timeout

    def validate_image_batch(self, images: Sequence[ImageUpload], limit: Optional[int] = None) -> None:
        """
        Validate a batch of images before anything is uploaded.

        Args:
            images: Images to upload
            limit: Maximum number of images allowed in the batch

        Raises:
            ResourceLimitExceededError: If the batch is too large
            UnsupportedFileTypeError: If a media type is not allowed
            FileSizeExceededError: If an image is too large
        """
        limit = self.max_images if limit is None else limit
        if len(images) > limit:
            raise ResourceLimitExceededError("Property images", self.max_images)

        for image in images:
            content_type = (image.content_type or "").lower()
            if content_type not in self.allowed_types:
                raise UnsupportedFileTypeError(content_type or "unknown", self.allowed_types)
            if image.size > self.max_file_size:
                raise FileSizeExceededError(image.size, self.max_file_size)

    async def _upload(self, image: ImageUpload) -> Optional[str]:
        raise NotImplementedError

    async def _delete(self, public_id: str) -> None:
        raise NotImplementedError

    async def upload(self, image: ImageUpload) -> Optional[str]:
        """Upload one image, returning its URL or None on failure or timeout."""
        try:
            return await asyncio.wait_for(self._upload(image), timeout=self.upload_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Image upload timed out after {self.upload_timeout}s: {image.filename}")
            return None
        except Exception as e:
            logger.error(f"Image upload failed for {image.filename}: {e}")
            return None

    async def upload_many(self, images: Sequence[ImageUpload]) -> List[str]:
        """
        Upload images in order.
        Failed uploads are omitted, so callers compare the result length with the input.
        """
        urls = []
        for image in images:
            url = await self.upload(image)
            if url:
                urls.append(url)
        return urls

    async def delete(self, image_url: str) -> bool:
        """Delete an image by URL. Failures are logged and reported as False."""
        public_id = extract_public_id(image_url)
        if not public_id:
            logger.warning(f"Could not extract public id from URL: {image_url}")
            return False

        try:
            await self._delete(public_id)
            logger.info(f"Deleted image {public_id}")
            return True
        except Exception as e:
            logger.warning(f"Image delete failed for {image_url}: {e}")
            return False

    async def delete_many(self, image_urls: Sequence[str]) -> int:
        deleted = 0
        for url in image_urls:
            if await self.delete(url):
                deleted += 1
        return deleted


class CloudinaryAssetStore(AssetStore):
    """Cloudinary implementation backed by the cloudinary SDK."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.folder = settings.asset_folder
        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )

    async def _upload(self, image: ImageUpload) -> Optional[str]:
        # The SDK is blocking; run it off the event loop
        result = await run_in_threadpool(
            cloudinary.uploader.upload,
            io.BytesIO(image.data),
            folder=self.folder,
            resource_type="image",
            timeout=self.upload_timeout,
        )

        secure_url = (result or {}).get("secure_url")
        if not isinstance(secure_url, str):
            logger.error("Cloudinary upload response has no secure_url")
            return None
        return secure_url

    async def _delete(self, public_id: str) -> None:
        result = await run_in_threadpool(cloudinary.uploader.destroy, public_id, resource_type="image")

        outcome = (result or {}).get("result")
        if outcome != "ok":
            raise UpstreamError(f"Cloudinary destroy returned {outcome!r} for {public_id}")
