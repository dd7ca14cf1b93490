from typing import Optional
from pydantic import Field, field_validator
from schemas.base import CamelModel


class RatingImage(CamelModel):
    image_url: str = Field(min_length=1)
    image_name: str = Field(min_length=1)
    image_size: int = Field(gt=0)


class CreateRatingRequest(CamelModel):
    order_id: int
    rating: int
    review_text: Optional[str] = None
    images: list[RatingImage] = []

    @field_validator('rating')
    @classmethod
    def validate_rating(cls, value):
        if value < 1 or value > 5:
            raise ValueError('Rating must be between 1 and 5')
        return value
