"""In-memory media store for development and testing.

Records every deletion request and can be told to fail for specific
public ids, which the product deletion tests use.
"""

from marketplace.media.port import MediaStore, MediaStoreError


class FakeMediaStore(MediaStore):
    def __init__(self) -> None:
        self.deleted: list[str] = []
        self.failing_ids: set[str] = set()

    def configure(self, failing_ids=None) -> None:
        self.failing_ids = set(failing_ids or [])

    def delete(self, public_id: str) -> None:
        if public_id in self.failing_ids:
            raise MediaStoreError(f"Could not delete {public_id}")
        self.deleted.append(public_id)
