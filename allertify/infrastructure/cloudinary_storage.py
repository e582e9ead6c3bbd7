"""Cloudinary image host wrapper."""

import io
from typing import Optional

import cloudinary
import cloudinary.uploader
import structlog
from starlette.concurrency import run_in_threadpool

from allertify.core.exceptions import ServiceNotConfiguredException, UpstreamServiceException
from allertify.domain.schemas.common import CamelModel

logger = structlog.get_logger(__name__)


class UploadedImage(CamelModel):
    public_id: str
    url: str
    secure_url: str
    width: int = 0
    height: int = 0
    format: str = ""
    bytes: int = 0


class CloudinaryImageHost:
    """Uploads scan images to Cloudinary."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = "allertify"):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        if self.is_configured():
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True,
            )

    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _upload(self, content: bytes, tags: list[str]) -> dict:
        return cloudinary.uploader.upload(
            io.BytesIO(content),
            resource_type="image",
            folder=self.folder,
            tags=tags,
            transformation=[{"quality": "auto:good"}, {"fetch_format": "auto"}],
            overwrite=True,
        )

    async def upload_image(self, content: bytes, tags: Optional[list[str]] = None) -> UploadedImage:
        if not self.is_configured():
            raise ServiceNotConfiguredException(
                "Image upload service is not configured. Please check environment variables."
            )

        try:
            # The SDK is blocking
            result = await run_in_threadpool(self._upload, content, tags or ["product-scan"])
        except Exception as e:
            logger.error("Cloudinary upload failed", error=str(e))
            raise UpstreamServiceException(f"Failed to upload image: {e}") from e

        uploaded = UploadedImage(
            public_id=result["public_id"],
            url=result["url"],
            secure_url=result["secure_url"],
            width=result.get("width") or 0,
            height=result.get("height") or 0,
            format=result.get("format") or "",
            bytes=result.get("bytes") or 0,
        )
        logger.info("Image uploaded", public_id=uploaded.public_id, bytes=uploaded.bytes)
        return uploaded
