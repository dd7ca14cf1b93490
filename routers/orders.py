from typing import Optional
from fastapi import APIRouter, Path, Query, Request
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.order_schemas import CreateOrderRequest
from services.order_service import OrderService
from services.pricing_service import money
from middleware.rate_limiter import limiter


router = APIRouter(
    prefix="/api/orders",
    tags=["orders"]
)


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def place_order(request: Request, body: CreateOrderRequest, user: user_dependency, db: db_dependency):
    order = OrderService.place_order(db, user["user_id"], body)
    return {
        "success": True,
        "orderId": order.id,
        "orderNumber": order.order_number,
        "total": money(order.total_amount)
    }


@router.get("", status_code=status.HTTP_200_OK)
async def list_orders(user: user_dependency, db: db_dependency,
                      product_id: Optional[int] = Query(default=None, alias="productId")):
    return {"orders": OrderService.list_user_orders(db, user["user_id"], product_id)}


@router.get("/{order_id}", status_code=status.HTTP_200_OK)
async def get_order(user: user_dependency, db: db_dependency, order_id: int = Path(gt=0)):
    return {"order": OrderService.get_user_order(db, user["user_id"], order_id)}
