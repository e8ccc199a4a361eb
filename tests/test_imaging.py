"""Unit tests for decoding image metadata."""

import pytest

from privacyguard.exceptions import InvalidImageError
from privacyguard.imaging import read_metadata
from privacyguard.models.entities import ImageData

from conftest import make_corrupt_png, make_image, make_png_header


class TestReadMetadata:
    @pytest.mark.parametrize("fmt", ["PNG", "JPEG", "WEBP"])
    def test_natural_size_decoded(self, fmt):
        metadata = read_metadata(make_image(640, 480, fmt=fmt))
        assert (metadata.width, metadata.height) == (640, 480)

    def test_header_only_image_is_read_without_pixels(self):
        metadata = read_metadata(ImageData.from_bytes(make_png_header(1200, 800)))
        assert (metadata.width, metadata.height) == (1200, 800)
        assert metadata.mime_type == "image/png"

    def test_corrupt_body_rejected(self):
        with pytest.raises(InvalidImageError, match="could not be decoded"):
            read_metadata(ImageData.from_bytes(make_corrupt_png()))

    def test_oversized_dimensions_rejected(self):
        image = ImageData.from_bytes(make_png_header(30000, 30000))
        with pytest.raises(InvalidImageError):
            read_metadata(image)
