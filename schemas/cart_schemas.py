from pydantic import Field
from schemas.base import CamelModel


class AddToCartRequest(CamelModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class UpdateCartRequest(CamelModel):
    product_id: int
    # zero or below removes the item
    quantity: int


class ProductRefRequest(CamelModel):
    """Body of cart and favorites requests that only name a product."""
    product_id: int
