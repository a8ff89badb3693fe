from typing import Optional

import pydantic
from fastapi import APIRouter, Depends, Header
from supabase import Client

from storefront.api.deps import get_db, get_optional_session, raw_body
from storefront.core.config import Settings, get_settings
from storefront.core.errors import ValidationError
from storefront.models.schemas import OrderCreate, OrderDelete, PaymentStatusUpdate
from storefront.services import orders_service

router = APIRouter()


@router.get("")
def list_orders(session: Optional[dict] = Depends(get_optional_session), client: Client = Depends(get_db)):
    return {"status": "success", "data": orders_service.list_orders(client, session)}


@router.post("")
def create_order(payload: OrderCreate, session: Optional[dict] = Depends(get_optional_session), client: Client = Depends(get_db)):
    return orders_service.create_order(client, session, payload)


@router.patch("")
def update_payment_status(
    body: bytes = Depends(raw_body),
    x_webhook_signature: Optional[str] = Header(None),
    client: Client = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # the signature covers the raw bytes, so parse only after it checks out
    orders_service.verify_webhook(body, x_webhook_signature, settings)
    try:
        payload = PaymentStatusUpdate.model_validate_json(body)
    except pydantic.ValidationError as exc:
        raise ValidationError("Invalid payment callback body") from exc
    order = orders_service.update_payment_status(client, payload.payment_id, payload.status)
    return {"status": "success", "data": order}


@router.delete("")
def delete_order(payload: Optional[OrderDelete] = None, session: Optional[dict] = Depends(get_optional_session), client: Client = Depends(get_db)):
    orders_service.delete_order(client, session, payload.id if payload else None)
    return {"message": "Order deleted"}
