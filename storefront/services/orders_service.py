import logging
from enum import Enum
from typing import Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from storefront.core.config import Settings
from storefront.core.errors import (
    Forbidden,
    InternalError,
    MissingFieldError,
    OrderNotFound,
    Unauthenticated,
    UserNotFound,
    ValidationError,
)
from storefront.core.security import verify_signature
from storefront.db.supabase import first
from storefront.models.schemas import OrderCreate, ProductSnapshot
from storefront.services import users_service

logger = logging.getLogger(__name__)

SHIPMENT_PROCESSING = "processing"


class PaymentStatus(str, Enum):
    """Statuses the payment gateway reports. Other strings are still stored."""

    PENDING = "pending"
    APPROVED = "approved"
    AUTHORIZED = "authorized"
    IN_PROCESS = "in_process"
    IN_MEDIATION = "in_mediation"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    CHARGED_BACK = "charged_back"


KNOWN_STATUSES = {s.value for s in PaymentStatus}


def unit_price(product: ProductSnapshot) -> float:
    if product.discounted_price:
        return product.discounted_price
    return product.price


def _require_user(client: Client, session: Optional[dict]) -> dict:
    if not session:
        raise Unauthenticated()
    user = users_service.get_user_by_email(client, session["email"])
    if not user:
        raise UserNotFound()
    return user


def _check_status(status: str) -> None:
    if status not in KNOWN_STATUSES:
        logger.warning("Storing unknown payment status %r", status)


def create_order(client: Client, session: Optional[dict], order: OrderCreate) -> dict:
    user = _require_user(client, session)
    address = users_service.get_address(client, user["id"])
    if not address:
        raise ValidationError("User has no shipping address")
    if not order.lines:
        raise ValidationError("Order has no products")
    _check_status(order.status)
    if first(client.table("orders").select("id").eq("payment_id", order.payment_id).execute()):
        raise ValidationError("An order with this payment id already exists")

    lines = [
        {"product_id": line.product_id, "quantity": line.quantity, "unit_price": unit_price(line.product)}
        for line in order.lines
    ]
    res = client.table("orders").insert({
        "user_id": user["id"],
        "address_id": address["id"],
        "shipping_type": order.shipping_type,
        "total_value": order.total,
        "freight_value": order.freight,
        "total_item_count": sum(line["quantity"] for line in lines),
        "recipient_name": order.address.name,
        "payment_method": order.payment_method,
        "payment_id": order.payment_id,
        "status": order.status,
        "shipment_status": SHIPMENT_PROCESSING,
    }).execute()
    created = res.data[0]

    # PostgREST gives no transaction across the two inserts
    try:
        ins = client.table("order_lines").insert([{"order_id": created["id"], **line} for line in lines]).execute()
    except APIError as exc:
        logger.error("Could not store lines of order %s, removing it", created["id"], exc_info=True)
        client.table("orders").delete().eq("id", created["id"]).execute()
        raise InternalError() from exc

    logger.info("Order %s created for %s (payment %s)", created["id"], user["email"], order.payment_id)
    created["lines"] = ins.data
    return created


def verify_webhook(body: bytes, signature: Optional[str], settings: Settings) -> None:
    if not settings.payment_webhook_secret:
        logger.error("PAYMENT_WEBHOOK_SECRET is not set, rejecting payment callback")
        raise Unauthenticated("Webhook secret not configured")
    if not verify_signature(body, signature, settings.payment_webhook_secret):
        logger.warning("Payment callback with invalid signature")
        raise Unauthenticated("Invalid webhook signature")


def update_payment_status(client: Client, payment_id, status: str) -> dict:
    try:
        payment_id = int(payment_id)
    except (TypeError, ValueError):
        raise ValidationError("payment_id must be numeric")
    if not status:
        raise MissingFieldError()
    order = first(client.table("orders").select("*").eq("payment_id", payment_id).execute())
    if not order:
        raise OrderNotFound()
    _check_status(status)
    res = client.table("orders").update({"status": status}).eq("id", order["id"]).execute()
    logger.info("Order %s payment %s -> %s", order["id"], payment_id, status)
    return res.data[0]


def expand_lines(client: Client, orders: List[dict]) -> List[dict]:
    """Attach each order's lines as product data merged with the line snapshot."""
    if not orders:
        return []
    ids = [o["id"] for o in orders]
    lines = client.table("order_lines").select("*").in_("order_id", ids).execute().data or []
    product_ids = list({line["product_id"] for line in lines})
    products: Dict[str, dict] = {}
    if product_ids:
        rows = client.table("products").select("*").in_("id", product_ids).execute().data or []
        products = {str(p["id"]): p for p in rows}

    by_order: Dict[str, List[dict]] = {}
    for line in lines:
        product = products.get(str(line["product_id"]), {"id": line["product_id"]})
        by_order.setdefault(str(line["order_id"]), []).append({
            **product,
            "product_id": line["product_id"],
            "quantity": line["quantity"],
            "unit_price": line["unit_price"],
        })
    return [{**o, "lines": by_order.get(str(o["id"]), [])} for o in orders]


def list_orders(client: Client, session: Optional[dict]) -> List[dict]:
    user = _require_user(client, session)
    query = client.table("orders").select("*")
    if user.get("role") != "admin":
        query = query.eq("user_id", user["id"])
    orders = query.order("created_at", desc=True).execute().data or []
    return expand_lines(client, orders)


def delete_order(client: Client, session: Optional[dict], order_id: Optional[str]) -> None:
    if not session:
        raise Unauthenticated()
    if not order_id:
        raise MissingFieldError("Order id is required")
    order = first(client.table("orders").select("*").eq("id", order_id).execute())
    if not order:
        raise OrderNotFound()
    owner = users_service.get_user_by_id(client, order["user_id"])
    # admins get no override here
    if not owner or owner["email"] != session["email"]:
        raise Forbidden()
    client.table("order_lines").delete().eq("order_id", order_id).execute()
    client.table("orders").delete().eq("id", order_id).execute()
    logger.info("Order %s deleted by %s", order_id, session["email"])
