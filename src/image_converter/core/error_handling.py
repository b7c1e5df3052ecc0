# src/image_converter/core/error_handling.py

import functools
import logging
import struct
from contextlib import contextmanager

from PIL import Image, UnidentifiedImageError

from .exceptions import (
    ConversionError,
    DecodeError,
    EncodeError,
    EncodeUnsupportedError,
    ImageConverterError,
)

# Messages Pillow uses when an encoder exists but refuses the mode/options.
UNSUPPORTED_ENCODER_MESSAGES = ("cannot write mode", "not available", "not supported")


def with_error_handling(func):
    """
    A decorator to wrap functions with standardized error handling.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        try:
            return func(*args, **kwargs)
        except ImageConverterError:
            logger.error(f"Error in '{func.__name__}'", exc_info=True)
            raise
        except Exception as e:
            logger.error(
                f"Error in '{func.__name__}': {e}",
                exc_info=True
            )
            if isinstance(e, UnidentifiedImageError):
                raise DecodeError(f"Failed to identify image in {func.__name__}: {e}") from e
            raise
    return wrapper


@contextmanager
def decoding_errors(source_name: str):
    """Translate Pillow load failures into DecodeError."""
    try:
        yield
    except ConversionError:
        raise
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError, struct.error) as e:
        raise DecodeError(
            f"Could not load {source_name}. It might be corrupted or in an unsupported format: {e}"
        ) from e


@contextmanager
def encoding_errors(format_name: str):
    """Translate Pillow save failures into EncodeUnsupportedError or EncodeError."""
    try:
        yield
    except ConversionError:
        raise
    except KeyError as e:
        # Pillow raises KeyError for save formats it has no writer for
        raise EncodeUnsupportedError(
            f"Conversion to {format_name.upper()} is not supported by the image encoder."
        ) from e
    except OSError as e:
        message = str(e).lower()
        if any(marker in message for marker in UNSUPPORTED_ENCODER_MESSAGES):
            raise EncodeUnsupportedError(
                f"Conversion to {format_name.upper()} is not supported: {e}"
            ) from e
        raise EncodeError(f"Failed to encode image as {format_name.upper()}: {e}") from e
    except Exception as e:  # noqa: BLE001
        raise EncodeError(f"Failed to encode image as {format_name.upper()}: {e}") from e


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize errors.
    """
    def __init__(self, operation_name="Batch Operation"):
        self.operation_name = operation_name
        self.errors = []
        self.logger = logging.getLogger(self.__class__.__module__ + '.' + self.__class__.__name__)

    def __enter__(self):
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        elif self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.error(
                    f"  Error {i+1}/{len(self.errors)} for item '{error_detail['item']}': {error_detail['error']}"
                )
        else:
            self.logger.info(f"{self.operation_name} completed successfully.")
        return False

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def add_error(self, error_message, item_identifier: str = "Unknown item"):
        """
        Call this method within the 'with' block to report an error for a specific item.

        Args:
            error_message: The error message or exception.
            item_identifier (str): A string identifying the item that failed.
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
        self.logger.debug(f"Error added for item '{item_identifier}' in {self.operation_name}: {error_message}")

    def errors_by_item(self):
        return {detail["item"]: detail["error"] for detail in self.errors}
