"""Upload validation and download files for redacted images."""

import logging
import time
from pathlib import Path
from typing import Optional

from privacyguard.exceptions import InvalidImageError
from privacyguard.models.entities import ImageData

from ..config import get_settings

logger = logging.getLogger(__name__)


class FileTooLargeError(InvalidImageError):
    """Raised when an upload exceeds the configured size limit."""


class FileStorage:
    """Validates uploads and writes result images offered for download."""

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Initialize file storage.

        Args:
            base_dir: Base directory for storage. Uses settings if not provided.
        """
        self._base_dir = base_dir

    @property
    def base_dir(self) -> Path:
        """Get the base storage directory."""
        if self._base_dir is None:
            settings = get_settings()
            self._base_dir = settings.storage_dir
        return self._base_dir

    @property
    def outputs_dir(self) -> Path:
        """Get the outputs directory."""
        path = self.base_dir / "outputs"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def load_upload(self, contents: bytes, filename: str = "") -> ImageData:
        """
        Validate uploaded bytes and wrap them as an image.

        The type is decided by magic bytes, never by the filename.

        Raises:
            FileTooLargeError: If the upload exceeds the size limit.
            InvalidImageError: If the upload is not a PNG, JPEG or WEBP image.
        """
        settings = get_settings()
        if len(contents) > settings.max_file_size_bytes:
            raise FileTooLargeError(
                f"File size exceeds maximum allowed size of {settings.max_file_size_mb}MB."
            )
        return ImageData.from_bytes(contents, source=filename)

    def load_path(self, file_path: str) -> ImageData:
        """Validate a file on disk (e.g. a Gradio temp upload) and load it."""
        path = Path(file_path)
        if not path.is_file():
            raise InvalidImageError(f"File not found: {file_path}")
        return self.load_upload(path.read_bytes(), filename=path.name)

    def get_output_path(self, job_id: str, image: ImageData) -> Path:
        return self.outputs_dir / f"{job_id}_masked.{image.extension}"

    def save_output(self, job_id: str, image: ImageData) -> Path:
        """Write a result image so it can be offered as a download.

        Outputs older than the configured retention are removed first.
        """
        self.cleanup_outputs(get_settings().output_retention_minutes * 60)
        path = self.get_output_path(job_id, image)
        path.write_bytes(image.content)
        logger.info("Wrote %d bytes to %s", len(image.content), path)
        return path

    def delete_file(self, file_path: Path) -> bool:
        """Delete a file. Returns True if deleted, False if not found."""
        if file_path.exists():
            file_path.unlink()
            return True
        return False

    def cleanup_outputs(self, max_age_seconds: float) -> int:
        """Delete result images older than *max_age_seconds*; returns the count."""
        cutoff = time.time() - max_age_seconds
        removed = 0
        for path in self.outputs_dir.glob("*_masked.*"):
            try:
                expired = path.stat().st_mtime < cutoff
            except FileNotFoundError:
                continue  # removed by a concurrent cleanup
            if expired and self.delete_file(path):
                removed += 1
        if removed:
            logger.info("Removed %d expired output file(s)", removed)
        return removed


# Global file storage instance
file_storage = FileStorage()
