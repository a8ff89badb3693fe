from fastapi import APIRouter, Depends
from supabase import Client

from storefront.api.deps import get_db, get_session
from storefront.models.schemas import AddressIn, MeOut
from storefront.services import users_service

router = APIRouter()


@router.get("/me", response_model=MeOut)
def me(session: dict = Depends(get_session), client: Client = Depends(get_db)):
    return {"session": session, "address": users_service.get_address(client, session["id"])}


@router.put("/me/address")
def save_address(payload: AddressIn, session: dict = Depends(get_session), client: Client = Depends(get_db)):
    return {"data": users_service.save_address(client, session["id"], payload.model_dump())}
