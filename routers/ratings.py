from fastapi import APIRouter, Path, Query
from starlette import status
from utils.deps import db_dependency, user_dependency, optional_user_dependency
from schemas.rating_schemas import CreateRatingRequest
from services.rating_service import RatingService


router = APIRouter(
    prefix="/api",
    tags=["ratings"]
)


@router.get("/ratings", status_code=status.HTTP_200_OK)
async def get_order_ratings(user: optional_user_dependency, db: db_dependency,
                            order_id: int = Query(alias="orderId", gt=0)):
    return RatingService.get_order_ratings(db, order_id, user["user_id"] if user else None)


@router.post("/ratings", status_code=status.HTTP_201_CREATED)
async def create_rating(body: CreateRatingRequest, user: user_dependency, db: db_dependency):
    RatingService.create_rating(db, user["user_id"], body)
    return {"success": True, "message": "Rating added successfully"}


@router.delete("/ratings", status_code=status.HTTP_200_OK)
async def delete_rating(user: user_dependency, db: db_dependency,
                        order_id: int = Query(alias="orderId", gt=0)):
    RatingService.delete_rating(db, user["user_id"], order_id)
    return {"success": True, "message": "Rating deleted successfully"}


@router.get("/product-ratings/{product_id}", status_code=status.HTTP_200_OK)
async def get_product_ratings(db: db_dependency, product_id: int = Path(gt=0)):
    return RatingService.product_ratings(db, product_id)
