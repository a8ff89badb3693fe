from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from supabase import Client

from storefront.api.deps import get_asset_store, get_db, get_optional_session
from storefront.core.config import Settings, get_settings
from storefront.db.storage import AssetStore
from storefront.services import banners_service
from storefront.services.uploads import ImageFile

router = APIRouter()


def read_images(files: Optional[List[UploadFile]]) -> List[ImageFile]:
    return [
        ImageFile(filename=f.filename or "image", content_type=f.content_type or "", content=f.file.read())
        for f in files or []
    ]


@router.get("")
def list_banners(client: Client = Depends(get_db)):
    return {"data": banners_service.list_banners(client)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_banner(
    images: Optional[List[UploadFile]] = File(None),
    session: Optional[dict] = Depends(get_optional_session),
    client: Client = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
    settings: Settings = Depends(get_settings),
):
    banner, failed = banners_service.create_banner(
        client, store, session, read_images(images), settings.upload_concurrency
    )
    return {"data": banner, "failed": failed}


@router.delete("/{banner_id}")
def delete_banner(banner_id: str, session: Optional[dict] = Depends(get_optional_session), client: Client = Depends(get_db)):
    banners_service.delete_banner(client, session, banner_id)
    return {"message": "Banner deleted"}
