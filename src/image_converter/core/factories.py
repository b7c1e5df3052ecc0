"""Factory classes for creating configured service instances."""

from typing import Optional

from .batch import BatchController
from .items import ItemConverter
from .models import ConverterConfig
from .observability import (
    LogLevel,
    MetricsCollector,
    ObservabilityConfig,
    create_logger,
    create_metrics_collector,
)
from .previews import PreviewRegistry
from .protocols import LoggerProtocol


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, debug: bool = False) -> LoggerProtocol:
        """Create a configured structured logger."""
        config = ObservabilityConfig(log_level=LogLevel.DEBUG if debug else LogLevel.INFO)
        return create_logger(name, config)


class ConverterFactory:
    """Factory for creating a fully wired batch controller."""

    @staticmethod
    def create_controller(
        config: Optional[ConverterConfig] = None,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        previews: Optional[PreviewRegistry] = None,
    ) -> BatchController:
        """Create a batch controller with its item converter."""
        config = config or ConverterConfig.from_env()

        if logger is None:
            logger = LoggerFactory.create_logger("image_converter", debug=config.debug)

        if metrics_collector is None:
            metrics_collector = create_metrics_collector(ObservabilityConfig())

        converter = ItemConverter(config, logger, metrics_collector)
        return BatchController(
            converter=converter,
            previews=previews or PreviewRegistry(),
            logger=logger,
            config=config,
        )
