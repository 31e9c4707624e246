"""Media store factory.

Provides get_media_store() / set_media_store() to swap implementations.
``MEDIA_ADAPTER`` selects the default; only ``fake`` ships with the project.
"""

import os

from marketplace.media.fake_adapter import FakeMediaStore
from marketplace.media.port import MediaStore

_current_store: MediaStore | None = None


def _build_default() -> MediaStore:
    adapter = os.environ.get("MEDIA_ADAPTER", "fake").lower()
    if adapter != "fake":
        raise ValueError(f"Unknown MEDIA_ADAPTER: {adapter}")
    return FakeMediaStore()


def get_media_store() -> MediaStore:
    """Return the current media store, building the configured default on first use."""
    global _current_store
    if _current_store is None:
        _current_store = _build_default()
    return _current_store


def set_media_store(store: MediaStore) -> None:
    """Override the active media store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_media_store() -> None:
    global _current_store
    _current_store = None
