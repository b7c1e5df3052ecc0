"""Image Converter - batch image format conversion."""

from .core import BatchController, ConverterConfig, ItemConverter, OutputFormat

__version__ = "0.1.0"

__all__ = ["BatchController", "ConverterConfig", "ItemConverter", "OutputFormat", "__version__"]
