"""Fake implementations for testing purposes."""

import io
import time
from typing import Any, Dict, List, Optional

from PIL import Image

from ..core.image_utils import from_data_uri, to_data_uri
from ..core.models import UploadedFile
from ..optimization.models import OptimizeImageInput, OptimizeImageOutput


class FakeLogger:
    """Fake logger for testing with support for LogContext."""

    def __init__(self, name: str = "test_logger"):
        self.name = name
        self.logs: List[Dict[str, Any]] = []
        self.should_fail = False

    def _log(
        self, level: str, message: str, context: Any = None, **kwargs: Any
    ) -> None:
        """Internal logging method with context support."""
        if self.should_fail:
            raise Exception("Simulated logging failure")

        log_entry = {
            "level": level,
            "message": message,
            "timestamp": time.time(),
            **kwargs,
        }

        if context is not None:
            if hasattr(context, "correlation_id"):
                log_entry["correlation_id"] = context.correlation_id
            if hasattr(context, "operation"):
                log_entry["operation"] = context.operation
            if hasattr(context, "component"):
                log_entry["component"] = context.component
            if hasattr(context, "metadata"):
                log_entry.update(context.metadata)

        self.logs.append(log_entry)

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        self._log("DEBUG", message, context, **kwargs)

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        self._log("INFO", message, context, **kwargs)

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        self._log("WARNING", message, context, **kwargs)

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        self._log("ERROR", message, context, **kwargs)

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get logged messages, optionally filtered by level."""
        if level:
            return [log for log in self.logs if log["level"] == level]
        return self.logs.copy()

    def clear_logs(self) -> None:
        """Clear all logged messages."""
        self.logs.clear()


class FakeOptimizer:
    """Fake AI optimizer that re-encodes the image as a smaller JPEG."""

    def __init__(self, details: str = "Re-encoded as JPEG at quality 70."):
        self.details = details
        self.requests: List[OptimizeImageInput] = []
        self.should_fail = False
        self.failure: Exception = RuntimeError("Simulated optimizer failure")

    def set_failure_mode(self, should_fail: bool, failure: Optional[Exception] = None) -> None:
        """Configure failure mode for testing error handling."""
        self.should_fail = should_fail
        if failure is not None:
            self.failure = failure

    async def optimize(self, request: OptimizeImageInput) -> OptimizeImageOutput:
        self.requests.append(request)
        if self.should_fail:
            raise self.failure

        data, _ = from_data_uri(request.photo_data_uri)
        image = Image.open(io.BytesIO(data)).convert("RGB")
        output = io.BytesIO()
        image.save(output, format="JPEG", quality=70)

        return OptimizeImageOutput(
            optimized_photo_data_uri=to_data_uri(output.getvalue(), "image/jpeg"),
            optimization_details=self.details,
        )


def create_test_image(
    width: int = 100,
    height: int = 100,
    format: str = "JPEG",
    mode: str = "RGB",
    color: Any = "red",
) -> bytes:
    """Create a test image in memory."""
    image = Image.new(mode, (width, height), color=color)

    # Add some pattern to make it more realistic
    if mode in ("RGB", "RGBA"):
        blue = (0, 0, 255) if mode == "RGB" else (0, 0, 255, 255)
        for x in range(0, width, 20):
            for y in range(0, height, 20):
                if (x + y) % 40 == 0:
                    for i in range(min(10, width - x)):
                        for j in range(min(10, height - y)):
                            image.putpixel((x + i, y + j), blue)

    img_bytes = io.BytesIO()
    if format == "JPEG":
        image.save(img_bytes, format=format, quality=95)
    else:
        image.save(img_bytes, format=format)
    return img_bytes.getvalue()


def make_upload(
    name: str,
    data: Optional[bytes] = None,
    last_modified: int = 1700000000000,
    content_type: Optional[str] = None,
    width: int = 100,
    height: int = 100,
) -> UploadedFile:
    """Build an UploadedFile, generating image bytes that match the name's extension."""
    if data is None:
        ext = name.rsplit(".", 1)[-1].lower()
        pil_format = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG", "gif": "GIF", "bmp": "BMP", "webp": "WEBP"}.get(ext, "PNG")
        data = create_test_image(width, height, format=pil_format)
    return UploadedFile(
        name=name,
        data=data,
        last_modified=last_modified,
        content_type=content_type,
    )
