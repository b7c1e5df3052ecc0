"""HTTP client for the AI image optimization service."""

from typing import Any, Dict, Optional, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import OptimizationError
from ..core.image_utils import from_data_uri, to_data_uri
from ..core.logging_config import get_logger
from ..core.models import ConverterConfig
from ..core.protocols import ImageOptimizer
from .models import OptimizeImageInput, OptimizeImageOutput


class HttpImageOptimizer:
    """Calls an external optimization endpoint over HTTP.

    The endpoint receives ``{"photoDataUri": ...}`` and answers with
    ``{"optimizedPhotoDataUri": ..., "optimizationDetails": ...}``.
    """

    DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the optimizer client.

        Args:
            endpoint: Full URL of the optimization endpoint
            api_key: Optional bearer token
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used in tests)
        """
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._logger = get_logger("image-converter.optimizer")

    @classmethod
    def from_config(cls, config: ConverterConfig) -> "HttpImageOptimizer":
        if not config.optimizer_url:
            raise OptimizationError("No optimization endpoint configured")
        return cls(
            endpoint=config.optimizer_url,
            api_key=config.optimizer_api_key,
            timeout=config.optimizer_timeout,
        )

    async def __aenter__(self):
        """Context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers: Dict[str, str] = {"Accept": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def optimize(self, request: OptimizeImageInput) -> OptimizeImageOutput:
        """Send one image to the service.

        Raises:
            OptimizationError: On transport failure, error status, or a
                response that does not match the expected schema
        """
        client = await self._ensure_client()
        try:
            response = await client.post(self.endpoint, json=request.model_dump(by_alias=True))
        except httpx.HTTPError as e:
            self._logger.error(f"Optimization request failed: {e}")
            raise OptimizationError(f"Optimization request failed: {e}") from e

        if not response.is_success:
            message = self._error_message(response)
            self._logger.error(f"Optimization service returned {response.status_code}: {message}")
            raise OptimizationError(f"Optimization service error ({response.status_code}): {message}")

        try:
            return OptimizeImageOutput.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise OptimizationError(f"Malformed optimization response: {e}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data: Any = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(data, dict):
            return str(data.get("message") or data.get("error") or data)
        return str(data)


async def optimize_image(
    data: bytes, mime_type: str, optimizer: ImageOptimizer
) -> Tuple[bytes, str]:
    """
    Optimize one image through an external optimizer.

    Args:
        data: Original image bytes
        mime_type: MIME type of the original image
        optimizer: Any object implementing the ImageOptimizer protocol

    Returns:
        Tuple of (optimized image bytes, optimization details)

    Raises:
        OptimizationError: If the service fails or returns an unusable image
    """
    if not data:
        raise OptimizationError("No image data to optimize")

    request = OptimizeImageInput(photo_data_uri=to_data_uri(data, mime_type))
    output = await optimizer.optimize(request)

    try:
        optimized, _ = from_data_uri(output.optimized_photo_data_uri)
    except ValueError as e:
        raise OptimizationError(f"Optimization service returned an invalid image: {e}") from e
    return optimized, output.optimization_details
