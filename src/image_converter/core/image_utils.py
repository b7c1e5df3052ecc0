"""Image codec utilities for the image converter."""

import base64
import binascii
import io
import os
from typing import Tuple

from PIL import Image

from .error_handling import decoding_errors, encoding_errors
from .exceptions import DecodeError, EncodeUnsupportedError
from .models import ConverterConfig, EncodedOutput, OutputFormat

# One PDF point per pixel, so the page matches the raster dimensions
PDF_RESOLUTION = 72.0


def decode_image(data: bytes, source_name: str = "image") -> Image.Image:
    """
    Decode raw bytes into a fully loaded PIL Image.

    Args:
        data: Encoded source image
        source_name: Name used in error messages

    Returns:
        Loaded PIL Image

    Raises:
        DecodeError: If the bytes are empty, corrupt or in an unknown format
    """
    if not data:
        raise DecodeError(f"Could not load {source_name}: no image data")

    with decoding_errors(source_name):
        image = Image.open(io.BytesIO(data))
        image.load()
        # Animated sources convert their first frame only
        if getattr(image, "n_frames", 1) > 1:
            image.seek(0)
            image = image.copy()
    return image


def flatten_onto_background(img: Image.Image, background: str = "#FFFFFF") -> Image.Image:
    """
    Composite an image onto an opaque background, discarding alpha.

    Every output format goes through here, including ones that could keep
    transparency.

    Args:
        img: PIL Image in any mode
        background: Background colour (anything PIL accepts as a colour)

    Returns:
        RGB image of the same size
    """
    if img.mode in ("P", "PA") or (img.mode == "L" and "transparency" in img.info):
        img = img.convert("RGBA")
    elif img.mode in ("LA", "La"):
        img = img.convert("RGBA")
    elif img.mode == "RGB" and "transparency" in img.info:
        img = img.convert("RGBA")

    canvas = Image.new("RGB", img.size, background)
    if img.mode in ("RGBA", "RGBa"):
        canvas.paste(img, (0, 0), img)
    else:
        canvas.paste(img.convert("RGB"), (0, 0))
    return canvas


def resize_for_format(img: Image.Image, fmt: OutputFormat, ico_size: int = 32) -> Image.Image:
    """Resample to the fixed icon size for ICO, leave other formats untouched."""
    if fmt is OutputFormat.ICO and img.size != (ico_size, ico_size):
        return img.resize((ico_size, ico_size), Image.Resampling.LANCZOS)
    return img


def pdf_orientation(width: int, height: int) -> str:
    """Page orientation for a raster: landscape when wider than tall."""
    return "landscape" if width > height else "portrait"


def derive_filename(original_name: str, fmt: OutputFormat) -> str:
    """
    Build the suggested download filename for a converted file.

    Args:
        original_name: Uploaded filename, e.g. "photo.png"
        fmt: Target format

    Returns:
        Original basename with the format's extension, e.g. "photo.jpg"
    """
    name = os.path.basename(original_name)
    stem, dot, _ = name.rpartition(".")
    # ".png" has an empty stem
    base = stem if dot else name
    return f"{base}.{fmt.extension}"


def encode_image(img: Image.Image, fmt: OutputFormat, config: ConverterConfig) -> Tuple[bytes, str]:
    """
    Encode a flattened RGB image into the requested format.

    Args:
        img: Prepared (resized and flattened) image
        fmt: Target format
        config: Converter configuration (JPEG quality, ICO mode)

    Returns:
        Tuple of (encoded bytes, MIME type of the payload)

    Raises:
        EncodeUnsupportedError: If no encoder is available for the format
        EncodeError: If the encoder fails
    """
    Image.init()
    output = io.BytesIO()

    if fmt is OutputFormat.ICO and not config.native_ico:
        # Pseudo-ICO: a PNG payload at icon size with an .ico name
        with encoding_errors(fmt.value):
            img.save(output, format="PNG")
        return output.getvalue(), OutputFormat.PNG.mime_type

    if fmt.pil_format not in Image.SAVE:
        raise EncodeUnsupportedError(
            f"Conversion to {fmt.value.upper()} is not supported by the installed image library."
        )

    with encoding_errors(fmt.value):
        if fmt is OutputFormat.JPEG:
            img.save(output, format="JPEG", quality=config.jpeg_quality)
        elif fmt is OutputFormat.PDF:
            img.save(output, format="PDF", resolution=PDF_RESOLUTION)
        elif fmt is OutputFormat.ICO:
            img.save(output, format="ICO", sizes=[img.size])
        else:
            img.save(output, format=fmt.pil_format)

    return output.getvalue(), fmt.mime_type


def convert_image_bytes(
    data: bytes, source_name: str, fmt: OutputFormat, config: ConverterConfig
) -> EncodedOutput:
    """
    Decode, resample, flatten and re-encode one image.

    Args:
        data: Source image bytes
        source_name: Original filename, used for the output filename
        fmt: Target format
        config: Converter configuration

    Returns:
        EncodedOutput with the payload and suggested filename

    Raises:
        DecodeError, EncodeUnsupportedError, EncodeError
    """
    image = decode_image(data, source_name)
    image = resize_for_format(image, fmt, config.ico_size)
    image = flatten_onto_background(image, config.background)
    payload, mime_type = encode_image(image, fmt, config)

    return EncodedOutput(
        data=payload,
        filename=derive_filename(source_name, fmt),
        format=fmt,
        mime_type=mime_type,
        width=image.width,
        height=image.height,
    )


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def from_data_uri(uri: str) -> Tuple[bytes, str]:
    """
    Decode a base64 data URI.

    Returns:
        Tuple of (payload bytes, MIME type)

    Raises:
        ValueError: If the URI is not a base64 data URI
    """
    if not uri.startswith("data:"):
        raise ValueError("Not a data URI")

    header, sep, encoded = uri[5:].partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("Data URI must use base64 encoding")

    mime_type = header[: -len(";base64")] or "application/octet-stream"
    try:
        return base64.b64decode(encoded, validate=True), mime_type
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
