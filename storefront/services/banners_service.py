import logging
from typing import List, Optional, Tuple

from postgrest.exceptions import APIError
from supabase import Client

from storefront.core.errors import Forbidden, InternalError, NotFound
from storefront.db.storage import AssetStore
from storefront.db.supabase import first
from storefront.services.uploads import ImageFile, discard, upload_required_images

logger = logging.getLogger(__name__)

BANNER_FOLDER = "banners"


def is_admin(session: Optional[dict]) -> bool:
    return bool(session) and session.get("role") == "admin"


def list_banners(client: Client) -> List[dict]:
    return client.table("banners").select("*").order("created_at", desc=True).execute().data or []


def create_banner(
    client: Client,
    store: AssetStore,
    session: Optional[dict],
    images: List[ImageFile],
    max_workers: int = 4,
) -> Tuple[dict, List[str]]:
    if not is_admin(session):
        raise Forbidden()
    batch = upload_required_images(store, BANNER_FOLDER, images, max_workers)
    try:
        res = client.table("banners").insert({"images": batch.urls}).execute()
    except APIError as exc:
        logger.error("Could not store banner, removing %d uploads", len(batch.uploaded), exc_info=True)
        discard(store, batch)
        raise InternalError() from exc
    banner = res.data[0]
    logger.info("Banner %s created with %d images", banner["id"], len(batch.urls))
    return banner, batch.failed


def delete_banner(client: Client, session: Optional[dict], banner_id: str) -> None:
    if not is_admin(session):
        raise Forbidden()
    banner = first(client.table("banners").select("*").eq("id", banner_id).execute())
    if not banner:
        raise NotFound("Banner not found")
    client.table("banners").delete().eq("id", banner_id).execute()
    logger.info("Banner %s deleted", banner_id)
