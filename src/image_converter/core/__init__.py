"""Core components of the image converter."""

from .image_utils import (
    convert_image_bytes,
    decode_image,
    derive_filename,
    encode_image,
    flatten_onto_background,
    from_data_uri,
    pdf_orientation,
    resize_for_format,
    to_data_uri,
)
from .logging_config import get_logger, setup_logger
from .exceptions import (
    ImageConverterError,
    ConfigurationError,
    ValidationError,
    UnsupportedFormatError,
    InvalidFileTypeError,
    ConversionError,
    DecodeError,
    EncodeUnsupportedError,
    EncodeError,
    ConversionTimeoutError,
    PartialFailure,
    PreviewResourceError,
    OptimizationError,
)
from .models import (
    BatchSummary,
    ConversionStatus,
    ConverterConfig,
    EncodedOutput,
    OutputFormat,
    UploadedFile,
)
from .previews import PreviewHandle, PreviewRegistry
from .items import ItemConverter, UploadedItem
from .batch import BatchController
from .factories import ConverterFactory

__all__ = [
    "OutputFormat",
    "ConversionStatus",
    "ConverterConfig",
    "UploadedFile",
    "EncodedOutput",
    "BatchSummary",
    "UploadedItem",
    "ItemConverter",
    "BatchController",
    "ConverterFactory",
    "PreviewHandle",
    "PreviewRegistry",
    "convert_image_bytes",
    "decode_image",
    "derive_filename",
    "encode_image",
    "flatten_onto_background",
    "from_data_uri",
    "pdf_orientation",
    "resize_for_format",
    "to_data_uri",
    "setup_logger",
    "get_logger",
    "ImageConverterError",
    "ConfigurationError",
    "ValidationError",
    "UnsupportedFormatError",
    "InvalidFileTypeError",
    "ConversionError",
    "DecodeError",
    "EncodeUnsupportedError",
    "EncodeError",
    "ConversionTimeoutError",
    "PartialFailure",
    "PreviewResourceError",
    "OptimizationError",
]
