# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import Dict, Generic, List, Literal, Optional, TypeVar
from decimal import Decimal
from datetime import datetime

T = TypeVar("T")

Role = Literal["user", "seller", "admin"]


class ApiResponse(BaseModel, Generic[T]):
    """Envelope for every successful response."""

    success: bool = True
    message: str
    data: Optional[T] = None


# ---------------------------------------------------------------- users


class UserCreate(BaseModel):
    """Schema for registering a user."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: Role = "user"


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)


class UserRead(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserQuery(BaseModel):
    search: Optional[str] = None
    role: Optional[Role] = None
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


class UserList(BaseModel):
    users: List[UserRead]
    total: int

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- products


class ProductCreate(BaseModel):
    """Schema for adding a product to the catalog."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    category: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Partial update; stock can never be pushed below zero."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductRead(BaseModel):
    id: int
    name: str
    description: str
    category: str
    price: Decimal
    stock: int
    is_active: bool
    seller_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductQuery(BaseModel):
    """Catalog search filters."""

    search: Optional[str] = Field(None, max_length=200)
    category: Optional[str] = None
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


class ProductList(BaseModel):
    products: List[ProductRead]
    total: int

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- cart


class CartItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class CartItemUpdate(BaseModel):
    """Quantity 0 removes the line."""

    quantity: int = Field(..., ge=0)


class CartItemOut(BaseModel):
    product_id: int
    quantity: int
    price: Decimal
    added_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    id: int
    user_id: int
    is_active: bool
    items: List[CartItemOut]
    total_amount: Decimal
    total_items: int
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CartValidation(BaseModel):
    valid: bool
    issues: List[str]


# ---------------------------------------------------------------- orders


class Address(BaseModel):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)


class OrderItemIn(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class OrderCreate(BaseModel):
    """Schema for placing an order.

    Without `items` the caller's active cart is checked out.
    """

    items: Optional[List[OrderItemIn]] = Field(None, min_length=1)
    shipping_address: Address
    payment_method: str = Field(..., min_length=1, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    items: List[OrderItemOut]
    total_amount: Decimal
    status: str
    shipping_address: Address
    payment_method: str
    payment_status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderStatusUpdate(BaseModel):
    # plain str: unknown values are rejected by the service as InvalidStatus
    status: str


class PaginatedOrders(BaseModel):
    orders: List[OrderOut]
    total_orders: int
    current_page: int
    total_pages: int

    model_config = ConfigDict(from_attributes=True)


class OrderStats(BaseModel):
    total_orders: int
    total_spent: Decimal
    orders_by_status: Dict[str, int]
