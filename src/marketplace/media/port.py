"""Media store port (abstract interface).

Images are opaque ``{url, public_id}`` pairs; the store is only asked to
forget them when the product that owns them goes away.
"""

from abc import ABC, abstractmethod


class MediaStoreError(Exception):
    """Raised by adapters when the backing store rejects a request."""


class MediaStore(ABC):
    """Abstract media store interface."""

    @abstractmethod
    def delete(self, public_id: str) -> None:
        """Delete the stored asset identified by ``public_id``."""
        ...
