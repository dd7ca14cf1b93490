from typing import Literal, Optional
from pydantic import EmailStr, Field
from schemas.base import CamelModel


class CustomerInfo(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=3)
    address: Optional[str] = None


class CreateOrderRequest(CamelModel):
    product_id: int
    quantity: int = Field(ge=1)
    customer_info: CustomerInfo
    delivery_method: Literal["pickup", "delivery"] = "pickup"
    payment_method: str = Field(min_length=1)
    notes: Optional[str] = None


class UpdateOrderStatusRequest(CamelModel):
    status: Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
