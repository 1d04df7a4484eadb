"""
API Schemas for VoidShop

Request bodies and response shapes. JSON uses camelCase on the wire
(``productId``, ``cartTotal``) while Python code uses snake_case; both
spellings are accepted on input.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from security import Role


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


# Largest values the INTEGER and NUMERIC(10, 2) columns hold.
MAX_INT = 2**31 - 1
MAX_AMOUNT = Decimal("99999999.99")

DbInt = Annotated[int, Field(ge=-MAX_INT - 1, le=MAX_INT)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Message(CamelModel):
    message: str


# Auth

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    role: Role


class AuthResponse(CamelModel):
    user: UserOut
    token: str


# Products

class ProductIn(CamelModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, le=MAX_AMOUNT)
    stock: int = Field(..., ge=0, le=MAX_INT)
    description: Optional[str] = None
    image_url: Optional[str] = None


class ProductOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category: str
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Cart

class CartItemIn(CamelModel):
    product_id: DbInt
    quantity: DbInt


class CartQuantityIn(CamelModel):
    quantity: DbInt


class CartLine(CamelModel):
    id: int
    name: str
    price: float
    quantity: int
    stock: int
    image_url: Optional[str] = None
    category: Optional[str] = None


class CartItemOut(CamelModel):
    id: int
    product_id: int
    quantity: int


class CartWriteResult(CamelModel):
    message: str
    cart_item: CartItemOut


# Favorites

class FavoriteIn(CamelModel):
    product_id: DbInt


class FavoriteProduct(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category: Optional[str] = None
    image_url: Optional[str] = None
    favorited_at: Optional[datetime] = None


class FavoriteToggle(CamelModel):
    message: str
    action: str


# Coupons

class CouponIn(CamelModel):
    code: str
    discount_type: str
    discount_value: Decimal = Field(..., le=MAX_AMOUNT)
    min_purchase: Optional[Decimal] = Field(None, le=MAX_AMOUNT)
    max_uses: Optional[DbInt] = None
    expiry_date: Optional[datetime] = None


class CouponOut(CamelModel):
    id: int
    code: str
    discount_type: DiscountType
    discount_value: float
    min_purchase: float = 0
    max_uses: Optional[int] = None
    uses_count: int = 0
    expiry_date: Optional[datetime] = None
    is_active: bool = True


class CouponValidateIn(CamelModel):
    code: str = Field(..., min_length=1)
    # a JSON number, numeric strings are rejected
    cart_total: float = Field(..., strict=True, le=float(MAX_AMOUNT))


class CouponQuote(CamelModel):
    code: str
    discount_type: DiscountType
    discount_value: float
    discount_percent: float
    original_total: float
    discount_amount: float
    discounted_total: float


class CouponDeleted(CamelModel):
    message: str
    coupon: CouponOut


# Orders

class OrderItemIn(CamelModel):
    product_id: DbInt
    quantity: int = Field(..., gt=0, le=MAX_INT)


class OrderIn(CamelModel):
    items: List[OrderItemIn]
    shipping_address: Optional[Dict[str, Any]] = None
    payment_method: Optional[Dict[str, Any]] = None
    address_id: Optional[DbInt] = None
    payment_method_id: Optional[DbInt] = None


class OrderItemOut(CamelModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    product_price: float
    quantity: int
    subtotal: float
    image_url: Optional[str] = None


class Purchaser(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None


class OrderOut(CamelModel):
    id: int
    user_id: int
    total: float
    status: OrderStatus
    address_id: Optional[int] = None
    payment_method_id: Optional[int] = None
    shipping_address: Optional[Dict[str, Any]] = None
    payment_method: Optional[Dict[str, Any]] = None
    items: List[OrderItemOut] = Field(default_factory=list)
    user: Optional[Purchaser] = None
    warnings: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderStatusIn(CamelModel):
    status: str


class OrderSummary(CamelModel):
    id: int
    user_id: int
    total: float
    status: OrderStatus
    user: Optional[Purchaser] = None
    created_at: Optional[datetime] = None


class OrderStats(CamelModel):
    total_orders: int
    total_revenue: float
    average_order_value: float
    total_products_sold: int
    recent_orders: List[OrderSummary]


# Profile

class ProfileOut(CamelModel):
    id: int
    username: str
    email: str
    role: Role
    created_at: Optional[datetime] = None


class ProfileUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=1, validation_alias=AliasChoices("username", "name"))
    email: Optional[EmailStr] = None


class AddressIn(CamelModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    state: str = ""
    country: str = "Perú"
    is_default: bool = False


class AddressUpdate(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    is_default: Optional[bool] = None


class AddressOut(CamelModel):
    id: int
    user_id: int
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    is_default: bool = False
    created_at: Optional[datetime] = None


class PaymentMethodIn(CamelModel):
    card_number: str = Field(..., min_length=1)
    cardholder_name: str = Field(..., min_length=1)
    expiry_month: DbInt
    expiry_year: DbInt
    cvv: str = Field(..., min_length=1)
    card_type: Optional[str] = None


class PaymentMethodOut(CamelModel):
    id: int
    cardholder_name: str
    last4: str
    expiry: str
    expiry_month: int
    expiry_year: int
    card_type: Optional[str] = None
    is_default: bool = False
    created_at: Optional[datetime] = None
