from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # storefront clients post camelCase, snake_case is accepted too
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Auth

class CredentialsIn(BaseModel):
    # empty defaults so a missing field is reported as missing_field, not 422
    email: str = ""
    password: str = ""
    name: str = ""


class GoogleCallbackIn(BaseModel):
    code: str


class SessionOut(BaseModel):
    id: str
    role: str
    name: Optional[str] = None
    email: str
    image: Optional[str] = None
    expires: str


class AuthOut(BaseModel):
    token: str
    token_type: str = "bearer"
    session: SessionOut


# Users

class AddressIn(CamelModel):
    name: str = Field(..., min_length=1)
    street: Optional[str] = None
    number: Optional[str] = None
    complement: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None


class MeOut(BaseModel):
    session: SessionOut
    address: Optional[dict] = None


# Orders

class ProductSnapshot(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    price: float = 0
    discounted_price: Optional[float] = None


class OrderLineIn(CamelModel):
    product_id: str
    quantity: int = Field(..., ge=1)
    product: ProductSnapshot


class OrderCreate(CamelModel):
    lines: List[OrderLineIn]
    freight: float = 0
    shipping_type: str
    total: float
    address: AddressIn
    status: str = "pending"
    payment_method: str
    payment_id: int


class PaymentStatusUpdate(CamelModel):
    status: str
    payment_id: Union[int, str]


class OrderDelete(BaseModel):
    id: Optional[str] = None


# Products

class ProductIn(BaseModel):
    name: str = ""
    price: float = Field(0, ge=0)
    discounted_price: float = Field(0, ge=0)
    description: str = ""
    tags: str = ""
    weight: float = 0.3
    height: float = 0
    width: float = 0
    length: float = 0
