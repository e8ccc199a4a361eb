"""Exception hierarchy for the PII redaction pipeline."""


class PrivacyGuardError(Exception):
    """Base exception for pipeline errors."""


class InvalidImageError(PrivacyGuardError):
    """Raised when an upload is not a supported raster image."""


class DetectionError(PrivacyGuardError):
    """Raised when the detection call fails or returns an invalid payload.

    Detection fails closed: callers must not proceed to masking.
    """


class GenerationError(PrivacyGuardError):
    """Raised when the image-generation call returns no usable image."""
