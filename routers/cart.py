from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.cart_schemas import AddToCartRequest, UpdateCartRequest, ProductRefRequest
from services.cart_service import CartService
from middleware.rate_limiter import limiter


router = APIRouter(
    prefix="/api/cart",
    tags=["cart"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def get_cart(user: user_dependency, db: db_dependency):
    return {"items": CartService.get_items(db, user["user_id"])}


@router.post("", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def add_to_cart(request: Request, body: AddToCartRequest, user: user_dependency, db: db_dependency):
    CartService.add_item(db, user["user_id"], body)
    return {"success": True}


@router.put("", status_code=status.HTTP_200_OK)
async def update_cart(body: UpdateCartRequest, user: user_dependency, db: db_dependency):
    CartService.set_quantity(db, user["user_id"], body)
    return {"success": True}


@router.delete("", status_code=status.HTTP_200_OK)
async def remove_from_cart(body: ProductRefRequest, user: user_dependency, db: db_dependency):
    CartService.remove_item(db, user["user_id"], body.product_id)
    return {"success": True}
