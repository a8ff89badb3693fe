import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import List

from storefront.core.errors import NoValidImages, ValidationError
from storefront.db.storage import AssetStore

logger = logging.getLogger(__name__)


@dataclass
class ImageFile:
    filename: str
    content_type: str
    content: bytes


@dataclass
class UploadedAsset:
    path: str
    url: str


@dataclass
class UploadBatch:
    uploaded: List[UploadedAsset] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def urls(self) -> List[str]:
        return [a.url for a in self.uploaded]


def _upload_one(store: AssetStore, folder: str, image: ImageFile) -> UploadedAsset:
    if not (image.content_type or "").startswith("image/"):
        raise ValueError(f"unsupported content type {image.content_type!r}")
    if not image.content:
        raise ValueError("empty file")
    path = store.upload(folder, image.filename, image.content, image.content_type)
    url = store.public_url(path)
    if not url:
        raise ValueError("asset host returned no URL")
    return UploadedAsset(path=path, url=url)


def upload_images(store: AssetStore, folder: str, images: List[ImageFile], max_workers: int = 4) -> UploadBatch:
    """Upload images concurrently. URLs come back in completion order."""
    batch = UploadBatch()
    if not images:
        return batch
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(images)))) as pool:
        futures = {pool.submit(_upload_one, store, folder, image): image for image in images}
        for future in as_completed(futures):
            image = futures[future]
            try:
                batch.uploaded.append(future.result())
            except Exception as exc:
                # recorded per image, the batch carries on
                logger.warning("Upload of %s to %s failed: %s", image.filename, folder, exc)
                batch.failed.append(image.filename)
    return batch


def upload_required_images(store: AssetStore, folder: str, images: List[ImageFile], max_workers: int = 4) -> UploadBatch:
    if not images:
        raise ValidationError("At least one image is required")
    batch = upload_images(store, folder, images, max_workers)
    if not batch.uploaded:
        raise NoValidImages()
    if batch.failed:
        logger.warning("%d of %d images failed for %s: %s", len(batch.failed), len(images), folder, batch.failed)
    return batch


def discard(store: AssetStore, batch: UploadBatch) -> None:
    try:
        store.remove([a.path for a in batch.uploaded])
    except Exception:
        logger.exception("Could not remove %d orphaned assets", len(batch.uploaded))
