import logging
import uuid
from typing import List

from supabase import Client

logger = logging.getLogger(__name__)


class AssetStore:
    """Images hosted in a Supabase Storage bucket."""

    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def upload(self, folder: str, filename: str, content: bytes, content_type: str) -> str:
        # random prefix so two uploads with the same filename never collide
        path = f"{folder}/{uuid.uuid4().hex}-{filename}"
        self._bucket().upload(path, content, {"content-type": content_type})
        return path

    def public_url(self, path: str) -> str:
        return self._bucket().get_public_url(path)

    def remove(self, paths: List[str]) -> None:
        if not paths:
            return
        self._bucket().remove(paths)
        logger.info("Removed %d assets from %s", len(paths), self.bucket)
