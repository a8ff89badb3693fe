from typing import List, Optional

import pydantic
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from supabase import Client

from storefront.api.banners import read_images
from storefront.api.deps import get_asset_store, get_db, get_optional_session
from storefront.core.config import Settings, get_settings
from storefront.core.errors import ValidationError
from storefront.db.storage import AssetStore
from storefront.models.schemas import ProductIn
from storefront.services import products_service

router = APIRouter()


@router.get("")
def list_products(client: Client = Depends(get_db)):
    return {"data": products_service.list_products(client)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_product(
    name: str = Form(""),
    price: float = Form(0),
    discounted_price: float = Form(0),
    description: str = Form(""),
    tags: str = Form(""),
    weight: float = Form(0.3),
    height: float = Form(0),
    width: float = Form(0),
    length: float = Form(0),
    images: Optional[List[UploadFile]] = File(None),
    session: Optional[dict] = Depends(get_optional_session),
    client: Client = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
    settings: Settings = Depends(get_settings),
):
    try:
        product = ProductIn(
            name=name, price=price, discounted_price=discounted_price, description=description,
            tags=tags, weight=weight, height=height, width=width, length=length,
        )
    except pydantic.ValidationError as exc:
        raise ValidationError("Prices must not be negative") from exc
    created, failed = products_service.create_product(
        client, store, session, product, read_images(images), settings.upload_concurrency
    )
    return {"data": created, "failed": failed}


@router.get("/{product_id}")
def get_product(product_id: str, client: Client = Depends(get_db)):
    return {"data": products_service.get_product(client, product_id)}


@router.delete("/{product_id}")
def delete_product(product_id: str, session: Optional[dict] = Depends(get_optional_session), client: Client = Depends(get_db)):
    products_service.delete_product(client, session, product_id)
    return {"message": "Product deleted"}
