from datetime import datetime
from decimal import Decimal
from typing import Literal
from pydantic import Field, field_validator, model_validator
from schemas.base import CamelModel
from utils.dates import to_naive_utc


class SaleFields(CamelModel):
    original_price: Decimal = Field(gt=0)
    sale_price: Decimal = Field(gt=0)
    discount_percentage: Decimal = Field(gt=0, le=100)
    quantity_available: int = Field(ge=1)
    start_date: datetime
    end_date: datetime

    @field_validator('start_date', 'end_date')
    @classmethod
    def as_naive_utc(cls, value: datetime):
        return to_naive_utc(value)

    @model_validator(mode='after')
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError('endDate must not be before startDate')
        return self


class CreateSaleRequest(SaleFields):
    product_id: int


class UpdateSaleRequest(SaleFields):
    status: Literal["active", "expired"] = "active"
