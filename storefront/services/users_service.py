from typing import Optional

from supabase import Client

from storefront.db.supabase import first

ADDRESS_FIELDS = ("name", "street", "number", "complement", "district", "city", "state", "postal_code")


def get_user_by_email(client: Client, email: str) -> Optional[dict]:
    return first(client.table("users").select("*").eq("email", email).execute())


def get_user_by_id(client: Client, user_id: str) -> Optional[dict]:
    return first(client.table("users").select("*").eq("id", user_id).execute())


def insert_user(client: Client, email: str, name: str, password: str, role: str, image: Optional[str] = None) -> dict:
    res = client.table("users").insert({
        "email": email,
        "name": name,
        "password": password,
        "role": role,
        "image": image,
    }).execute()
    return res.data[0]


def get_address(client: Client, user_id: str) -> Optional[dict]:
    return first(client.table("addresses").select("*").eq("user_id", user_id).execute())


def save_address(client: Client, user_id: str, address: dict) -> dict:
    """Create or replace the single address of a user."""
    data = {k: address.get(k) for k in ADDRESS_FIELDS}
    existing = get_address(client, user_id)
    if existing:
        res = client.table("addresses").update(data).eq("id", existing["id"]).execute()
    else:
        res = client.table("addresses").insert({"user_id": user_id, **data}).execute()
    return res.data[0]


def public_user(user: dict) -> dict:
    return {
        "id": str(user["id"]),
        "email": user["email"],
        "name": user.get("name"),
        "role": user.get("role") or "user",
        "image": user.get("image") or "",
    }
