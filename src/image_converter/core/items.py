"""Uploaded items and the per-item conversion state machine."""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional, Union

from .exceptions import ConversionError, ConversionTimeoutError, EncodeError
from .image_utils import convert_image_bytes, pdf_orientation
from .models import ConversionStatus, ConverterConfig, EncodedOutput, OutputFormat, UploadedFile
from .observability import LogContext, MetricsCollector, PerformanceMetrics
from .previews import PreviewHandle
from .protocols import LoggerProtocol


@dataclass(eq=False)
class UploadedItem:
    """One uploaded image and the state of its conversion."""

    id: str
    name: str
    data: bytes = field(repr=False)
    size: int
    preview: PreviewHandle
    output_format: OutputFormat = OutputFormat.PNG
    status: ConversionStatus = ConversionStatus.IDLE
    result: Optional[EncodedOutput] = None
    error: Optional[str] = None
    content_type: str = "application/octet-stream"

    @classmethod
    def from_upload(
        cls,
        upload: UploadedFile,
        preview: PreviewHandle,
        output_format: OutputFormat = OutputFormat.PNG,
    ) -> "UploadedItem":
        return cls(
            id=upload.identity,
            name=upload.name,
            data=upload.data,
            size=upload.size,
            preview=preview,
            output_format=output_format,
            content_type=upload.content_type or "application/octet-stream",
        )

    def set_format(self, fmt: Union[OutputFormat, str]) -> None:
        """Override the output format for this item only."""
        self.output_format = OutputFormat.parse(fmt)


class ItemConverter:
    """Runs conversions for single items and records their status."""

    def __init__(
        self,
        config: Optional[ConverterConfig] = None,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._config = config or ConverterConfig()
        self._logger = logger
        self._metrics_collector = metrics_collector

    @property
    def config(self) -> ConverterConfig:
        return self._config

    async def convert(
        self,
        item: UploadedItem,
        target_format: Union[OutputFormat, str, None] = None,
    ) -> EncodedOutput:
        """
        Convert one item, moving it through converting to success or error.

        Args:
            item: The item to convert
            target_format: Format to convert to; the item's own format when
                omitted. A given format is stored on the item.

        Returns:
            The encoded output, also stored on ``item.result``

        Raises:
            UnsupportedFormatError: Before any state change, for a format
                outside the supported set
            ConversionError: After the item has been marked as failed
        """
        fmt = OutputFormat.parse(target_format if target_format is not None else item.output_format)
        item.output_format = fmt

        log_context = LogContext(
            correlation_id=f"item_{item.id}_{int(time.time() * 1000)}",
            operation="convert_image",
            component="item_converter",
        ).with_metadata(item=item.name, format=fmt.value)

        item.result = None
        item.error = None
        item.status = ConversionStatus.CONVERTING
        self._debug("Starting conversion", log_context)

        start_time = time.time()
        try:
            output = await self._run(item, fmt)
        except ConversionError as e:
            self._fail(item, e, log_context, start_time)
            raise
        except Exception as e:  # noqa: BLE001
            error = EncodeError(f"An unexpected error occurred during conversion: {e}")
            self._fail(item, error, log_context, start_time)
            raise error from e
        except asyncio.CancelledError:
            self._fail(item, ConversionError(f"Conversion of {item.name} was cancelled"), log_context, start_time)
            raise

        item.result = output
        item.status = ConversionStatus.SUCCESS
        self._record(start_time, True, None, fmt)
        if self._logger:
            if fmt is OutputFormat.PDF:
                log_context = log_context.with_metadata(
                    orientation=pdf_orientation(output.width, output.height)
                )
            self._logger.info(
                "Conversion succeeded",
                log_context,
                filename=output.filename,
                bytes=output.size,
                processing_time_ms=round((time.time() - start_time) * 1000, 2),
            )
        return output

    async def _run(self, item: UploadedItem, fmt: OutputFormat) -> EncodedOutput:
        work = asyncio.to_thread(convert_image_bytes, item.data, item.name, fmt, self._config)
        if self._config.item_timeout is None:
            return await work
        try:
            return await asyncio.wait_for(work, timeout=self._config.item_timeout)
        except asyncio.TimeoutError as e:
            raise ConversionTimeoutError(
                f"Conversion of {item.name} did not finish within {self._config.item_timeout}s"
            ) from e

    def _fail(
        self,
        item: UploadedItem,
        error: ConversionError,
        log_context: LogContext,
        start_time: float,
    ) -> None:
        item.result = None
        item.error = str(error)
        item.status = ConversionStatus.ERROR
        self._record(start_time, False, str(error), item.output_format)
        if self._logger:
            self._logger.error(
                "Conversion failed",
                log_context.with_metadata(error=str(error), error_type=type(error).__name__),
            )

    def _record(
        self, start_time: float, success: bool, error_message: Optional[str], fmt: OutputFormat
    ) -> None:
        if self._metrics_collector is None:
            return
        self._metrics_collector.record_metric(
            PerformanceMetrics(
                operation="convert_image",
                start_time=start_time,
                end_time=time.time(),
                success=success,
                error_message=error_message,
                metadata={"format": fmt.value},
            )
        )

    def _debug(self, message: str, context: LogContext) -> None:
        if self._logger:
            self._logger.debug(message, context)
