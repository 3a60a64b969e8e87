"""
Image Processing Service

Responsibilities:
- Decode uploaded JPEG/PNG images
- Downscale images wider than the configured maximum (aspect preserved)
- Re-encode to WebP with fixed quality/effort
- Report output dimensions
"""

import io
from dataclasses import dataclass

from PIL import Image

from portfolio_upload.core.config import settings
from portfolio_upload.core.errors import TranscodeFailed
from portfolio_upload.core.logger import logger


@dataclass
class ProcessedImage:
    data: bytes
    width: int
    height: int
    format: str
    original_width: int
    original_height: int

    @property
    def content_type(self) -> str:
        return f"image/{self.format}"


class ImageProcessor:
    """
    Resizes and recompresses images for the public bucket.

    Images are never upscaled; only images wider than ``max_width`` are
    resized, keeping their aspect ratio.
    """

    def __init__(
        self,
        max_width: int = None,
        quality: int = None,
        effort: int = None,
    ):
        self.max_width = max_width or settings.MAX_IMAGE_WIDTH
        self.quality = quality if quality is not None else settings.WEBP_QUALITY
        self.effort = effort if effort is not None else settings.WEBP_EFFORT
        self.format = settings.OUTPUT_FORMAT

    def process(self, image_data: bytes) -> ProcessedImage:
        """
        Process and optimize an image.

        Args:
            image_data: Raw image bytes

        Returns:
            ProcessedImage with the WebP bytes and its dimensions

        Raises:
            TranscodeFailed: If the image cannot be decoded or encoded
        """
        try:
            with Image.open(io.BytesIO(image_data)) as image:
                image.load()
                original_size = image.size

                resized = self._resize(image)
                prepared = self._prepare_mode(resized)

                buffer = io.BytesIO()
                prepared.save(buffer, format="WEBP", quality=self.quality, method=self.effort)
                width, height = prepared.size
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
            logger.error(f"Image processing failed: {str(e)}")
            raise TranscodeFailed(f"Image processing failed: {str(e)}") from e

        logger.debug(
            f"Transcoded {original_size[0]}x{original_size[1]} -> {width}x{height} {self.format}"
        )

        return ProcessedImage(
            data=buffer.getvalue(),
            width=width,
            height=height,
            format=self.format,
            original_width=original_size[0],
            original_height=original_size[1],
        )

    def _resize(self, image: Image.Image) -> Image.Image:
        width, height = image.size
        if width <= self.max_width:
            return image

        new_height = max(1, round(height * self.max_width / width))
        return image.resize((self.max_width, new_height), Image.Resampling.LANCZOS)

    def _prepare_mode(self, image: Image.Image) -> Image.Image:
        """WebP accepts RGB and RGBA only."""
        if image.mode in ("RGB", "RGBA"):
            return image
        if image.mode in ("LA", "PA") or (image.mode == "P" and "transparency" in image.info):
            return image.convert("RGBA")
        return image.convert("RGB")


# Singleton instance
_processor_instance = None


def get_image_processor() -> ImageProcessor:
    """Get or create singleton ImageProcessor instance."""
    global _processor_instance
    if _processor_instance is None:
        _processor_instance = ImageProcessor()
    return _processor_instance
