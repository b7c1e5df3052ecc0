"""Preview handles for uploaded items.

Each uploaded item owns one preview handle, acquired when the item is created
and released exactly once when the item is removed or the whole set is
cleared. The registry tracks live handles so leaks and double releases can be
detected.
"""

import io
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .error_handling import with_error_handling
from .exceptions import PreviewResourceError
from .image_utils import decode_image

DEFAULT_THUMBNAIL_SIZE = (256, 256)


@dataclass
class PreviewHandle:
    """Reference to a preview resource backed by an item's bytes."""

    url: str
    item_id: str
    _data: Optional[bytes] = field(default=None, repr=False)
    released: bool = False

    def read(self) -> bytes:
        """Return the bytes behind the preview."""
        if self.released or self._data is None:
            raise PreviewResourceError(f"Preview {self.url} has been released")
        return self._data

    @with_error_handling
    def thumbnail(self, size: Tuple[int, int] = DEFAULT_THUMBNAIL_SIZE) -> bytes:
        """Render a PNG thumbnail that fits inside ``size``."""
        image = decode_image(self.read(), self.item_id)
        image.thumbnail(size)
        if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            image = image.convert("RGBA")
        output = io.BytesIO()
        image.save(output, format="PNG")
        return output.getvalue()


class PreviewRegistry:
    """Creates and releases preview handles, tracking the live ones."""

    def __init__(self, scheme: str = "preview"):
        self._scheme = scheme
        self._live: Dict[str, PreviewHandle] = {}
        self.created_count = 0
        self.released_count = 0

    def acquire(self, item_id: str, data: bytes) -> PreviewHandle:
        """Create a preview handle for an item's bytes."""
        handle = PreviewHandle(
            url=f"{self._scheme}:{uuid.uuid4()}", item_id=item_id, _data=data
        )
        self._live[handle.url] = handle
        self.created_count += 1
        return handle

    def release(self, handle: PreviewHandle) -> None:
        """
        Release a preview handle.

        Raises:
            PreviewResourceError: If the handle was already released or was
                not created by this registry
        """
        if handle.released:
            raise PreviewResourceError(f"Preview {handle.url} released twice")
        if self._live.pop(handle.url, None) is not handle:
            raise PreviewResourceError(f"Unknown preview handle {handle.url}")

        handle.released = True
        handle._data = None
        self.released_count += 1

    def is_live(self, handle: PreviewHandle) -> bool:
        return self._live.get(handle.url) is handle

    @property
    def live_count(self) -> int:
        return len(self._live)

    def live_handles(self) -> List[PreviewHandle]:
        return list(self._live.values())
