from typing import Optional
from pydantic import Field, StrictBool
from schemas.base import CamelModel


class CreateNotificationRequest(CamelModel):
    type: str = Field(min_length=1)
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    order_id: Optional[int] = None


class UpdateNotificationRequest(CamelModel):
    is_read: StrictBool
