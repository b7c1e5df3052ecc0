"""Testing utilities and fakes for the image converter."""

from .fakes import (
    FakeLogger,
    FakeOptimizer,
    create_test_image,
    make_upload,
)

__all__ = [
    "FakeLogger",
    "FakeOptimizer",
    "create_test_image",
    "make_upload",
]
