"""Protocol definitions for dependency injection and testability."""

from typing import Any, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from ..optimization.models import OptimizeImageInput, OptimizeImageOutput


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class ImageOptimizer(Protocol):
    """External service that optimizes one image for web use."""

    async def optimize(self, request: "OptimizeImageInput") -> "OptimizeImageOutput":
        """Return the optimized image and a description of what changed."""
        ...
