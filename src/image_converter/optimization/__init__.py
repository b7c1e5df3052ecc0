"""Pluggable AI image optimization."""

from .client import HttpImageOptimizer, optimize_image
from .models import OptimizeImageInput, OptimizeImageOutput

__all__ = [
    "HttpImageOptimizer",
    "OptimizeImageInput",
    "OptimizeImageOutput",
    "optimize_image",
]
