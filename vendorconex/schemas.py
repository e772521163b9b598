from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, PositiveInt, field_validator


class Role(str, Enum):
    customer = "customer"
    vendor = "vendor"
    admin = "admin"


class OrderStatus(str, Enum):
    pending = "Pending"
    processing = "Processing"
    shipped = "Shipped"
    delivered = "Delivered"
    cancelled = "Cancelled"


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be empty")
    return value.strip()


def _whole_cents(value: Optional[float]) -> Optional[float]:
    # prices carry at most two decimals so order totals round exactly
    if value is not None and Decimal(str(value)).as_tuple().exponent < -2:
        raise ValueError("price must have at most two decimal places")
    return value


# -------------------- Accounts --------------------

class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)
    location: str = ""
    role: Role = Role.customer

    @field_validator("name")
    def name_not_blank(cls, v: str):
        return _not_blank(v)

    @field_validator("role")
    def no_self_service_admin(cls, v: Role):
        if v is Role.admin:
            raise ValueError("admin accounts cannot be created through signup")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# -------------------- Catalog --------------------

class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    category: str = Field(..., min_length=1)
    stock_quantity: int = Field(..., ge=0)
    vendor: str = Field(..., min_length=1)
    image_url: Optional[str] = None

    @field_validator("name", "description", "category")
    def text_not_blank(cls, v: str):
        return _not_blank(v)

    @field_validator("price")
    def price_in_cents(cls, v: float):
        return _whole_cents(v)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    category: Optional[str] = Field(default=None, min_length=1)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None

    @field_validator("price")
    def price_in_cents(cls, v: Optional[float]):
        return _whole_cents(v)


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str

    @field_validator("comment")
    def comment_not_blank(cls, v: str):
        return _not_blank(v)


# -------------------- Cart --------------------

class CartItemAdd(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: PositiveInt = 1


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=0)


# -------------------- Orders --------------------

class ShippingAddress(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip: str = Field(..., min_length=1)
    country: str = "India"


class CheckoutRequest(BaseModel):
    shipping_address: Optional[ShippingAddress] = None


class OrderLineCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: PositiveInt


class OrderCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    products: List[OrderLineCreate] = Field(..., min_length=1)
    shipping_address: ShippingAddress


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


# -------------------- Chat --------------------

class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    chat_history: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("message")
    def message_not_blank(cls, v: str):
        return _not_blank(v)
