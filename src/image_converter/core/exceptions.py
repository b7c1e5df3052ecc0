"""Custom exceptions for the image converter."""

from typing import Dict, Optional


class ImageConverterError(Exception):
    """Base exception for all image converter errors."""


class ConfigurationError(ImageConverterError):
    """Error raised for invalid configuration options."""


class ValidationError(ImageConverterError):
    """Error raised when input is rejected before any work is attempted."""


class UnsupportedFormatError(ValidationError):
    """Requested output format is not one of the supported formats."""


class InvalidFileTypeError(ValidationError):
    """None of the uploaded files is an image."""


class ConversionError(ImageConverterError):
    """Error raised when converting a single item fails."""


class DecodeError(ConversionError):
    """Source bytes could not be decoded into an image."""


class EncodeUnsupportedError(ConversionError):
    """The encoder cannot produce the requested format for this image."""


class EncodeError(ConversionError):
    """Encoding failed for any other reason."""


class ConversionTimeoutError(ConversionError):
    """Conversion did not finish within the configured time limit."""


class PartialFailure(ImageConverterError):
    """Aggregate signal for a batch in which at least one item failed."""

    def __init__(
        self,
        message: str,
        succeeded: int = 0,
        failed: int = 0,
        errors: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.succeeded = succeeded
        self.failed = failed
        self.errors = errors or {}


class PreviewResourceError(ImageConverterError):
    """A preview handle was released twice or does not belong to the registry."""


class OptimizationError(ImageConverterError):
    """The external AI optimization service failed."""
