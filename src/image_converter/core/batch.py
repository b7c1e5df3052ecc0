"""Batch controller: owns the uploaded items and converts them together."""

import asyncio
import time
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .error_handling import BatchOperationContextManager
from .exceptions import InvalidFileTypeError
from .items import ItemConverter, UploadedItem
from .models import BatchSummary, ConverterConfig, EncodedOutput, OutputFormat, UploadedFile
from .previews import PreviewRegistry
from .protocols import ImageOptimizer, LoggerProtocol


class BatchController:
    """Keeps the set of uploaded items and fans conversions out over them."""

    def __init__(
        self,
        converter: Optional[ItemConverter] = None,
        previews: Optional[PreviewRegistry] = None,
        logger: Optional[LoggerProtocol] = None,
        config: Optional[ConverterConfig] = None,
    ):
        self._config = config or (converter.config if converter else ConverterConfig())
        self._converter = converter or ItemConverter(self._config, logger)
        self._previews = previews or PreviewRegistry()
        self._logger = logger
        self._items: Dict[str, UploadedItem] = {}
        self.batch_format: OutputFormat = self._config.default_format

    @property
    def items(self) -> List[UploadedItem]:
        """Current items in upload order."""
        return list(self._items.values())

    @property
    def previews(self) -> PreviewRegistry:
        return self._previews

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[UploadedItem]:
        return iter(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def get(self, item_id: str) -> Optional[UploadedItem]:
        return self._items.get(item_id)

    def add_files(self, files: Iterable[UploadedFile]) -> List[UploadedItem]:
        """
        Add uploaded files, keeping only images and skipping known identities.

        Args:
            files: Files handed over by the upload mechanism

        Returns:
            Items that were newly added (possibly empty when every image was
            already present)

        Raises:
            InvalidFileTypeError: If none of the files is an image. Existing
                items are left untouched.
        """
        images = [f for f in files if f.is_image]
        if not images:
            if self._logger:
                self._logger.warning("Rejected upload without image files")
            raise InvalidFileTypeError("Please upload only image files.")

        added: List[UploadedItem] = []
        for upload in images:
            if upload.identity in self._items:
                continue
            preview = self._previews.acquire(upload.identity, upload.data)
            item = UploadedItem.from_upload(upload, preview, self._config.default_format)
            self._items[item.id] = item
            added.append(item)

        if self._logger:
            self._logger.info(
                f"Added {len(added)} image(s)",
                skipped=len(images) - len(added),
                total=len(self._items),
            )
        return added

    def remove_item(self, item_id: str) -> bool:
        """Release an item's preview and drop it. Returns False if absent."""
        item = self._items.pop(item_id, None)
        if item is None:
            return False
        self._previews.release(item.preview)
        if self._logger:
            self._logger.debug(f"Removed {item.name}")
        return True

    def remove_all(self) -> int:
        """Release every preview and empty the set. Returns the number removed."""
        items = list(self._items.values())
        self._items.clear()
        for item in items:
            self._previews.release(item.preview)
        if self._logger and items:
            self._logger.info(f"Removed all {len(items)} image(s)")
        return len(items)

    async def convert_item(
        self, item_id: str, target_format: Union[OutputFormat, str, None] = None
    ) -> EncodedOutput:
        """Convert (or retry) a single item by id."""
        item = self._items.get(item_id)
        if item is None:
            raise KeyError(item_id)
        return await self._converter.convert(item, target_format)

    async def convert_all(
        self, target_format: Union[OutputFormat, str, None] = None
    ) -> BatchSummary:
        """
        Convert every current item concurrently and wait for all of them.

        Failures do not stop sibling conversions; the summary reports them and
        exposes a ``PartialFailure`` through ``summary.partial_failure``.

        Args:
            target_format: Batch output format; the current ``batch_format``
                when omitted

        Returns:
            BatchSummary with success and failure counts

        Raises:
            UnsupportedFormatError: If the format is not supported, before any
                item is touched
        """
        fmt = OutputFormat.parse(target_format if target_format is not None else self.batch_format)
        self.batch_format = fmt

        items = self.items
        if not items:
            return BatchSummary(format=fmt)

        start_time = time.time()
        with BatchOperationContextManager(f"Batch conversion to {fmt.value.upper()}") as batch:
            semaphore = asyncio.Semaphore(self._config.concurrency) if self._config.concurrency else None
            tasks = [self._convert_bounded(item, fmt, semaphore) for item in items]
            results = await asyncio.gather(*tasks, return_exceptions=True)

            succeeded = 0
            for item, result in zip(items, results):
                if isinstance(result, BaseException):
                    batch.add_error(result, item.id)
                else:
                    succeeded += 1

        summary = BatchSummary(
            format=fmt,
            succeeded=succeeded,
            failed=batch.error_count,
            errors=batch.errors_by_item(),
            processing_time=time.time() - start_time,
        )
        if self._logger:
            log = self._logger.warning if summary.failed else self._logger.info
            log(summary.message(), succeeded=summary.succeeded, failed=summary.failed)
        return summary

    async def _convert_bounded(
        self, item: UploadedItem, fmt: OutputFormat, semaphore: Optional[asyncio.Semaphore]
    ) -> EncodedOutput:
        if semaphore is None:
            return await self._converter.convert(item, fmt)
        async with semaphore:
            return await self._converter.convert(item, fmt)

    def results(self) -> List[EncodedOutput]:
        """Outputs of every item whose latest conversion succeeded."""
        return [item.result for item in self._items.values() if item.result is not None]

    async def optimize_item(self, item_id: str, optimizer: ImageOptimizer) -> Tuple[bytes, str]:
        """
        Send one item's original bytes to the AI optimization service.

        Conversion state is not touched.

        Returns:
            Tuple of (optimized image bytes, description of the changes)
        """
        from ..optimization.client import optimize_image

        item = self._items.get(item_id)
        if item is None:
            raise KeyError(item_id)
        return await optimize_image(item.data, item.content_type, optimizer)
