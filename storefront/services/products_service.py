import logging
from typing import List, Optional, Tuple

from postgrest.exceptions import APIError
from supabase import Client

from storefront.core.errors import Forbidden, InternalError, MissingFieldError, NotFound
from storefront.db.storage import AssetStore
from storefront.db.supabase import first
from storefront.models.schemas import ProductIn
from storefront.services.banners_service import is_admin
from storefront.services.uploads import ImageFile, discard, upload_required_images

logger = logging.getLogger(__name__)

PRODUCT_FOLDER = "products"


def list_products(client: Client) -> List[dict]:
    return client.table("products").select("*").order("created_at", desc=True).execute().data or []


def get_product(client: Client, product_id: str) -> dict:
    product = first(client.table("products").select("*").eq("id", product_id).execute())
    if not product:
        raise NotFound("Product not found")
    return product


def create_product(
    client: Client,
    store: AssetStore,
    session: Optional[dict],
    product: ProductIn,
    images: List[ImageFile],
    max_workers: int = 4,
) -> Tuple[dict, List[str]]:
    if not is_admin(session):
        raise Forbidden()
    if not product.name.strip() or not product.description.strip() or not product.tags.strip():
        raise MissingFieldError()
    batch = upload_required_images(store, PRODUCT_FOLDER, images, max_workers)
    try:
        res = client.table("products").insert({**product.model_dump(), "images": batch.urls}).execute()
    except APIError as exc:
        logger.error("Could not store product %r, removing %d uploads", product.name, len(batch.uploaded), exc_info=True)
        discard(store, batch)
        raise InternalError() from exc
    created = res.data[0]
    logger.info("Product %s (%s) created", created["id"], product.name)
    return created, batch.failed


def delete_product(client: Client, session: Optional[dict], product_id: str) -> None:
    if not is_admin(session):
        raise Forbidden()
    get_product(client, product_id)
    client.table("products").delete().eq("id", product_id).execute()
    logger.info("Product %s deleted", product_id)
