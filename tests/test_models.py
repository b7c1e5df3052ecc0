"""Tests for core data models."""

import os
from unittest.mock import patch

import pytest

from image_converter.core.exceptions import (
    ConfigurationError,
    PartialFailure,
    UnsupportedFormatError,
)
from image_converter.core.models import (
    BatchSummary,
    ConversionStatus,
    ConverterConfig,
    EncodedOutput,
    OutputFormat,
    UploadedFile,
)


class TestOutputFormat:
    """Tests for the closed set of output formats."""

    def test_closed_set_members(self):
        """Test the supported formats are exactly the eight known ones."""
        assert {fmt.value for fmt in OutputFormat} == {
            "png", "jpeg", "webp", "bmp", "gif", "tiff", "pdf", "ico",
        }

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("png", OutputFormat.PNG),
            ("PNG", OutputFormat.PNG),
            (" webp ", OutputFormat.WEBP),
            ("jpg", OutputFormat.JPEG),
            (".jpeg", OutputFormat.JPEG),
            (OutputFormat.ICO, OutputFormat.ICO),
        ],
    )
    def test_parse_accepts_known_formats(self, value, expected):
        """Test parse normalizes case, whitespace, dots and the jpg alias."""
        assert OutputFormat.parse(value) is expected

    @pytest.mark.parametrize("value", ["svg", "heic", "", "png2", None, 3])
    def test_parse_rejects_unknown_formats(self, value):
        """Test parse raises for anything outside the closed set."""
        with pytest.raises(UnsupportedFormatError):
            OutputFormat.parse(value)

    def test_extension_jpeg_is_jpg(self):
        """Test JPEG uses the .jpg extension and others use their name."""
        assert OutputFormat.JPEG.extension == "jpg"
        for fmt in OutputFormat:
            if fmt is not OutputFormat.JPEG:
                assert fmt.extension == fmt.value

    def test_mime_types(self):
        """Test MIME types for a few formats."""
        assert OutputFormat.PNG.mime_type == "image/png"
        assert OutputFormat.JPEG.mime_type == "image/jpeg"
        assert OutputFormat.PDF.mime_type == "application/pdf"
        assert OutputFormat.ICO.mime_type == "image/x-icon"

    def test_pil_formats(self):
        """Test each format maps to a Pillow encoder name."""
        assert OutputFormat.TIFF.pil_format == "TIFF"
        assert OutputFormat.JPEG.pil_format == "JPEG"


class TestConversionStatus:
    """Tests for ConversionStatus."""

    def test_values(self):
        assert [s.value for s in ConversionStatus] == ["idle", "converting", "success", "error"]

    def test_terminal_states(self):
        assert ConversionStatus.SUCCESS.is_terminal
        assert ConversionStatus.ERROR.is_terminal
        assert not ConversionStatus.IDLE.is_terminal
        assert not ConversionStatus.CONVERTING.is_terminal


class TestConverterConfig:
    """Tests for ConverterConfig."""

    def test_default_values(self):
        """Test ConverterConfig default values."""
        config = ConverterConfig()
        assert config.default_format is OutputFormat.PNG
        assert config.jpeg_quality == 90
        assert config.ico_size == 32
        assert config.background == "#FFFFFF"
        assert config.native_ico is False
        assert config.concurrency is None
        assert config.item_timeout is None
        assert config.optimizer_url is None
        assert config.debug is False

    def test_default_format_from_string(self):
        """Test default_format accepts format names."""
        assert ConverterConfig(default_format="jpg").default_format is OutputFormat.JPEG

    def test_invalid_default_format(self):
        with pytest.raises(UnsupportedFormatError):
            ConverterConfig(default_format="svg")

    def test_from_env(self):
        """Test configuration is read from IMAGE_CONVERTER_* variables."""
        env = {
            "IMAGE_CONVERTER_DEFAULT_FORMAT": "webp",
            "IMAGE_CONVERTER_CONCURRENCY": "4",
            "IMAGE_CONVERTER_ITEM_TIMEOUT": "2.5",
            "IMAGE_CONVERTER_NATIVE_ICO": "true",
            "IMAGE_CONVERTER_OPTIMIZER_URL": "https://optimizer.test/run",
        }
        with patch.dict(os.environ, env):
            config = ConverterConfig.from_env()

        assert config.default_format is OutputFormat.WEBP
        assert config.concurrency == 4
        assert config.item_timeout == 2.5
        assert config.native_ico is True
        assert config.optimizer_url == "https://optimizer.test/run"

    def test_from_env_overrides_win(self):
        with patch.dict(os.environ, {"IMAGE_CONVERTER_DEFAULT_FORMAT": "webp"}):
            config = ConverterConfig.from_env(default_format="gif")
        assert config.default_format is OutputFormat.GIF

    @pytest.mark.parametrize(
        "env",
        [
            {"IMAGE_CONVERTER_DEFAULT_FORMAT": "svg"},
            {"IMAGE_CONVERTER_CONCURRENCY": "many"},
            {"IMAGE_CONVERTER_CONCURRENCY": "0"},
            {"IMAGE_CONVERTER_JPEG_QUALITY": "150"},
            {"IMAGE_CONVERTER_BACKGROUND": "notacolour"},
        ],
    )
    def test_from_env_invalid_values(self, env):
        """Test invalid environment values raise ConfigurationError."""
        with patch.dict(os.environ, env):
            with pytest.raises(ConfigurationError):
                ConverterConfig.from_env()

    def test_background_accepts_pil_colours(self):
        assert ConverterConfig(background="black").background == "black"
        assert ConverterConfig(background="#00ff0080").background == "#00ff0080"

    def test_invalid_background_rejected_up_front(self):
        """Test a bad background colour fails at configuration time, not per item."""
        with pytest.raises(ValueError, match="notacolour"):
            ConverterConfig(background="notacolour")
        with pytest.raises(ConfigurationError, match="background"):
            ConverterConfig.from_env(background="notacolour")


class TestUploadedFile:
    """Tests for UploadedFile."""

    def test_size_defaults_to_data_length(self):
        upload = UploadedFile(name="a.png", data=b"12345")
        assert upload.size == 5

    def test_content_type_guessed_from_name(self):
        assert UploadedFile(name="a.png", data=b"x").content_type == "image/png"
        assert UploadedFile(name="notes.txt", data=b"x").content_type == "text/plain"
        assert UploadedFile(name="blob", data=b"x").content_type == "application/octet-stream"

    def test_is_image(self):
        assert UploadedFile(name="a.jpg", data=b"x").is_image
        assert UploadedFile(name="a", data=b"x", content_type="image/webp").is_image
        assert not UploadedFile(name="a.txt", data=b"x").is_image

    def test_identity_from_name_timestamp_and_size(self):
        """Test identity is derived from (name, last_modified, size)."""
        upload = UploadedFile(name="photo.png", data=b"abc", last_modified=42)
        assert upload.identity == "photo.png-42-3"

    def test_identity_is_deterministic(self):
        first = UploadedFile(name="photo.png", data=b"abc", last_modified=42)
        second = UploadedFile(name="photo.png", data=b"abc", last_modified=42)
        assert first.identity == second.identity


class TestEncodedOutput:
    """Tests for EncodedOutput."""

    def test_data_uri(self):
        output = EncodedOutput(
            data=b"\x89PNG",
            filename="a.png",
            format=OutputFormat.PNG,
            mime_type="image/png",
            width=1,
            height=1,
        )
        assert output.data_uri() == "data:image/png;base64,iVBORw=="
        assert output.size == 4


class TestBatchSummary:
    """Tests for BatchSummary."""

    def test_all_succeeded(self):
        summary = BatchSummary(format=OutputFormat.WEBP, succeeded=3)
        assert summary.total == 3
        assert summary.partial_failure is None
        summary.raise_for_failures()
        assert summary.message() == "Converted 3 images to WEBP."

    def test_partial_failure(self):
        summary = BatchSummary(
            format=OutputFormat.PNG, succeeded=4, failed=1, errors={"c.png-1-3": "bad"}
        )
        failure = summary.partial_failure
        assert isinstance(failure, PartialFailure)
        assert failure.succeeded == 4
        assert failure.failed == 1
        assert failure.errors == {"c.png-1-3": "bad"}
        assert summary.message() == "Some images could not be converted."

        with pytest.raises(PartialFailure, match="1 of 5"):
            summary.raise_for_failures()
