"""
Image ingestion for question pictures.

Uploaded rasters are decoded, scaled down to fit a bounding square,
re-encoded as JPEG and returned as an embeddable data URI.
"""
import asyncio
import base64
import io
import logging
import struct
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageOps

from .errors import ImageDecodeError, ValidationError


DATA_URI_PREFIX = "data:image/jpeg;base64,"


@dataclass(frozen=True)
class ImageSettings:
    """Limits applied to ingested images."""
    max_dimension: int = 400
    quality: float = 0.6


def get_image_src(src: Optional[str]) -> str:
    """
    Return src if it is safe to embed, otherwise an empty string.

    Accepted values are data URIs for images, absolute http(s) URLs and
    root-relative paths.
    """
    if not src:
        return ""
    if src.startswith("data:image"):
        return src
    if src.startswith("http"):
        return src
    if src.startswith("/"):
        return src
    return ""


def compute_scale(width: int, height: int, max_dimension: int) -> float:
    """Uniform scale factor that fits the image in max_dimension, never above 1."""
    if width <= 0 or height <= 0:
        raise ImageDecodeError(f"Invalid image dimensions {width}x{height}")
    return min(max_dimension / width, max_dimension / height, 1)


def target_size(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    scale = compute_scale(width, height, max_dimension)
    return max(1, round(width * scale)), max(1, round(height * scale))


class ImageIngestor:
    """Decode, resize and compress uploaded images into data URIs."""

    def __init__(self, settings: Optional[ImageSettings] = None):
        self.logger = logging.getLogger(__name__)
        self.settings = settings or ImageSettings()

    def encode(self, data: bytes) -> str:
        """
        Run the full pipeline synchronously.

        Args:
            data: Raw bytes of the uploaded file

        Returns:
            A 'data:image/jpeg;base64,...' string

        Raises:
            ImageDecodeError: If the bytes cannot be decoded as an image
        """
        image = self._decode(data)
        original_size = image.size
        size = target_size(image.width, image.height, self.settings.max_dimension)
        if size != image.size:
            image = image.resize(size, Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        quality = int(round(self.settings.quality * 100))
        image.save(buffer, format="JPEG", quality=quality)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")

        self.logger.debug(
            f"Ingested image {original_size[0]}x{original_size[1]} -> {size[0]}x{size[1]}, "
            f"{len(buffer.getvalue())} bytes at quality {quality}"
        )
        return DATA_URI_PREFIX + encoded

    async def ingest(self, data: Optional[bytes]) -> Optional[str]:
        """
        Run the pipeline off the event loop.

        Returns:
            The data URI, or None when no file was supplied
        """
        if not data:
            return None
        return await asyncio.to_thread(self.encode, data)

    def validate_image_src(self, src: str) -> str:
        """
        Check a stored image value.

        Raises:
            ValidationError: If a non-empty value is not an embeddable reference
        """
        if src and not get_image_src(src):
            raise ValidationError(f"Unsupported image source: {src[:40]!r}")
        return src

    def _decode(self, data: bytes) -> Image.Image:
        # Plugin parsers raise SyntaxError, struct.error and others on corrupt chunks.
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
            image = ImageOps.exif_transpose(image)
        except (OSError, ValueError, SyntaxError, struct.error, IndexError, TypeError,
                Image.DecompressionBombError) as e:
            raise ImageDecodeError(f"Could not decode image: {e}") from e
        return self._flatten(image)

    @staticmethod
    def _flatten(image: Image.Image) -> Image.Image:
        """Composite transparent images onto white; JPEG has no alpha channel."""
        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        if image.mode != "RGB":
            return image.convert("RGB")
        return image
