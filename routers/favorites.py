from fastapi import APIRouter
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.cart_schemas import ProductRefRequest
from services.favorite_service import FavoriteService


router = APIRouter(
    prefix="/api/favorites",
    tags=["favorites"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def list_favorites(user: user_dependency, db: db_dependency):
    return {"items": FavoriteService.list_items(db, user["user_id"])}


@router.post("", status_code=status.HTTP_200_OK)
async def add_favorite(body: ProductRefRequest, user: user_dependency, db: db_dependency):
    FavoriteService.add(db, user["user_id"], body.product_id)
    return {"success": True}


@router.delete("", status_code=status.HTTP_200_OK)
async def remove_favorite(body: ProductRefRequest, user: user_dependency, db: db_dependency):
    FavoriteService.remove(db, user["user_id"], body.product_id)
    return {"success": True}
