import pytest

from image_converter.core.exceptions import (
    ConfigurationError,
    ConversionError,
    ConversionTimeoutError,
    DecodeError,
    EncodeError,
    EncodeUnsupportedError,
    ImageConverterError,
    InvalidFileTypeError,
    OptimizationError,
    PartialFailure,
    PreviewResourceError,
    UnsupportedFormatError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error_cls, parent",
    [
        (DecodeError, ConversionError),
        (EncodeUnsupportedError, ConversionError),
        (EncodeError, ConversionError),
        (ConversionTimeoutError, ConversionError),
        (UnsupportedFormatError, ValidationError),
        (InvalidFileTypeError, ValidationError),
        (ConversionError, ImageConverterError),
        (ValidationError, ImageConverterError),
        (PartialFailure, ImageConverterError),
        (PreviewResourceError, ImageConverterError),
        (OptimizationError, ImageConverterError),
        (ConfigurationError, ImageConverterError),
    ],
)
def test_exception_hierarchy(error_cls, parent) -> None:
    assert issubclass(error_cls, parent)


def test_partial_failure_carries_counts() -> None:
    failure = PartialFailure("1 of 2 failed", succeeded=1, failed=1, errors={"a": "boom"})
    assert str(failure) == "1 of 2 failed"
    assert failure.succeeded == 1
    assert failure.failed == 1
    assert failure.errors == {"a": "boom"}


def test_partial_failure_defaults() -> None:
    assert PartialFailure("x").errors == {}
