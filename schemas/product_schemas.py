from decimal import Decimal
from typing import Optional
from pydantic import Field
from schemas.base import CamelModel


class CreateProductRequest(CamelModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)  # category name, e.g. "Eggs", "Chicks"
    price: Decimal = Field(ge=0)
    stock: int = Field(ge=0)
    description: Optional[str] = None
    # relative paths such as "/uploads/xyz.jpg" or absolute URLs
    images: list[str] = []


class UpdateProductRequest(CreateProductRequest):
    # None keeps the current images, a list (even empty) replaces them all
    images: Optional[list[str]] = None
