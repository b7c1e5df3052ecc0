"""Shared data models for the image converter."""

import base64
import mimetypes
import os
from enum import Enum
from typing import Dict, Optional, Union

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .exceptions import ConfigurationError, PartialFailure, UnsupportedFormatError


class OutputFormat(str, Enum):
    """Closed set of formats an image can be converted to."""

    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"
    BMP = "bmp"
    GIF = "gif"
    TIFF = "tiff"
    PDF = "pdf"
    ICO = "ico"

    @classmethod
    def parse(cls, value: Union["OutputFormat", str]) -> "OutputFormat":
        """
        Resolve a user supplied format into a member of the closed set.

        Args:
            value: Enum member or case-insensitive format name ("jpg" is an
                alias of "jpeg")

        Returns:
            Matching OutputFormat

        Raises:
            UnsupportedFormatError: If the value is not a supported format
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise UnsupportedFormatError(f"Unsupported output format: {value!r}")

        name = value.strip().lower().lstrip(".")
        if name == "jpg":
            name = "jpeg"
        try:
            return cls(name)
        except ValueError:
            raise UnsupportedFormatError(
                f"Unsupported output format: {value!r} "
                f"(expected one of {', '.join(f.value for f in cls)})"
            ) from None

    @property
    def extension(self) -> str:
        """File extension used for converted files."""
        return "jpg" if self is OutputFormat.JPEG else self.value

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @property
    def pil_format(self) -> str:
        """Name of the Pillow encoder that produces this format."""
        return _PIL_FORMATS[self]


_MIME_TYPES: Dict[OutputFormat, str] = {
    OutputFormat.PNG: "image/png",
    OutputFormat.JPEG: "image/jpeg",
    OutputFormat.WEBP: "image/webp",
    OutputFormat.BMP: "image/bmp",
    OutputFormat.GIF: "image/gif",
    OutputFormat.TIFF: "image/tiff",
    OutputFormat.PDF: "application/pdf",
    OutputFormat.ICO: "image/x-icon",
}

_PIL_FORMATS: Dict[OutputFormat, str] = {
    OutputFormat.PNG: "PNG",
    OutputFormat.JPEG: "JPEG",
    OutputFormat.WEBP: "WEBP",
    OutputFormat.BMP: "BMP",
    OutputFormat.GIF: "GIF",
    OutputFormat.TIFF: "TIFF",
    OutputFormat.PDF: "PDF",
    OutputFormat.ICO: "ICO",
}


class ConversionStatus(str, Enum):
    """Lifecycle state of a single item's conversion."""

    IDLE = "idle"
    CONVERTING = "converting"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ConversionStatus.SUCCESS, ConversionStatus.ERROR)


class ConverterConfig(BaseModel):
    """Configuration for the converter."""

    default_format: OutputFormat = OutputFormat.PNG
    jpeg_quality: int = Field(default=90, ge=1, le=100)
    ico_size: int = Field(default=32, gt=0)
    background: str = "#FFFFFF"
    native_ico: bool = False
    concurrency: Optional[int] = Field(default=None, gt=0)
    item_timeout: Optional[float] = Field(default=None, gt=0)
    optimizer_url: Optional[str] = None
    optimizer_api_key: Optional[str] = None
    optimizer_timeout: float = Field(default=60.0, gt=0)
    debug: bool = False

    @field_validator("default_format", mode="before")
    @classmethod
    def _parse_format(cls, value: Union[OutputFormat, str]) -> OutputFormat:
        return OutputFormat.parse(value)

    @field_validator("background")
    @classmethod
    def _check_background(cls, value: str) -> str:
        try:
            ImageColor.getrgb(value)
        except ValueError as e:
            raise ValueError(f"Invalid background colour {value!r}: {e}") from e
        return value

    @classmethod
    def from_env(cls, **overrides: object) -> "ConverterConfig":
        """
        Build a configuration from IMAGE_CONVERTER_* environment variables.

        Environment Variables:
            IMAGE_CONVERTER_DEFAULT_FORMAT: Default output format
            IMAGE_CONVERTER_JPEG_QUALITY: JPEG quality (1-100)
            IMAGE_CONVERTER_CONCURRENCY: Maximum concurrent conversions
            IMAGE_CONVERTER_ITEM_TIMEOUT: Per-item timeout in seconds
            IMAGE_CONVERTER_NATIVE_ICO: Write real ICO containers ("1"/"true")
            IMAGE_CONVERTER_OPTIMIZER_URL: AI optimization endpoint
            IMAGE_CONVERTER_OPTIMIZER_API_KEY: AI optimization API key
            IMAGE_CONVERTER_OPTIMIZER_TIMEOUT: AI optimization timeout in seconds
            IMAGE_CONVERTER_DEBUG: Enable debug logging

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        values: Dict[str, object] = {}
        for field_name in cls.model_fields:
            raw = os.getenv(f"IMAGE_CONVERTER_{field_name.upper()}")
            if raw is None or raw == "":
                continue
            if field_name in ("native_ico", "debug"):
                values[field_name] = raw.strip().lower() in ("1", "true", "yes", "on")
            else:
                values[field_name] = raw
        values.update(overrides)

        try:
            return cls(**values)
        except UnsupportedFormatError as e:
            raise ConfigurationError(str(e)) from e
        except ValueError as e:
            raise ConfigurationError(f"Invalid converter configuration: {e}") from e


class UploadedFile(BaseModel):
    """A file handed over by the upload mechanism."""

    name: str
    data: bytes
    size: int = -1
    last_modified: int = 0
    content_type: Optional[str] = None

    @model_validator(mode="after")
    def _fill_defaults(self) -> "UploadedFile":
        if self.size < 0:
            self.size = len(self.data)
        if self.content_type is None:
            guessed, _ = mimetypes.guess_type(self.name)
            self.content_type = guessed or "application/octet-stream"
        return self

    @property
    def is_image(self) -> bool:
        return bool(self.content_type and self.content_type.startswith("image/"))

    @property
    def identity(self) -> str:
        """Deterministic id used to de-duplicate repeated uploads."""
        return f"{self.name}-{self.last_modified}-{self.size}"


class EncodedOutput(BaseModel):
    """Result of a successful conversion."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    filename: str
    format: OutputFormat
    mime_type: str
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.data)

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class BatchSummary(BaseModel):
    """Aggregated outcome of a batch conversion."""

    format: OutputFormat
    succeeded: int = 0
    failed: int = 0
    errors: Dict[str, str] = Field(default_factory=dict)
    processing_time: float = 0.0

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def partial_failure(self) -> Optional[PartialFailure]:
        """Aggregate failure signal, present when at least one item failed."""
        if self.failed == 0:
            return None
        return PartialFailure(
            f"{self.failed} of {self.total} images could not be converted",
            succeeded=self.succeeded,
            failed=self.failed,
            errors=dict(self.errors),
        )

    def raise_for_failures(self) -> None:
        failure = self.partial_failure
        if failure is not None:
            raise failure

    def message(self) -> str:
        """Single notification text describing the batch outcome."""
        if self.failed:
            return "Some images could not be converted."
        return f"Converted {self.total} images to {self.format.value.upper()}."
