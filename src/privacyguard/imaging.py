"""Image decoding helpers (header-only, no pixel processing)."""

import io
import logging

from PIL import Image, UnidentifiedImageError

from .exceptions import InvalidImageError
from .models.entities import ImageData, ImageMetadata

logger = logging.getLogger(__name__)


def read_metadata(image: ImageData) -> ImageMetadata:
    """Decode the natural pixel size of *image*.

    Only the header is parsed; Pillow loads pixel data lazily.
    """
    try:
        with Image.open(io.BytesIO(image.content)) as img:
            width, height = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise InvalidImageError(f"Image could not be decoded: {e}") from e

    if width <= 0 or height <= 0:
        raise InvalidImageError(f"Image has invalid dimensions {width}x{height}")

    logger.debug("Decoded %s image %dx%d", image.mime_type, width, height)
    return ImageMetadata(width=width, height=height, mime_type=image.mime_type)
