from fastapi import APIRouter, Path
from starlette import status
from utils.deps import db_dependency, admin_dependency
from schemas.order_schemas import UpdateOrderStatusRequest
from services.order_service import OrderService


router = APIRouter(
    prefix="/api/admin/orders",
    tags=["admin"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def list_orders(admin: admin_dependency, db: db_dependency):
    return {"orders": OrderService.list_all_orders(db)}


@router.get("/{order_id}", status_code=status.HTTP_200_OK)
async def get_order(admin: admin_dependency, db: db_dependency, order_id: int = Path(gt=0)):
    return {"order": OrderService.get_order(db, order_id)}


@router.get("/{order_id}/receipt", status_code=status.HTTP_200_OK)
async def get_receipt(admin: admin_dependency, db: db_dependency, order_id: int = Path(gt=0)):
    return {"receipt": OrderService.build_receipt(db, order_id)}


@router.put("/{order_id}", status_code=status.HTTP_200_OK)
async def update_order_status(body: UpdateOrderStatusRequest, admin: admin_dependency,
                              db: db_dependency, order_id: int = Path(gt=0)):
    return OrderService.update_status(db, order_id, body.status)
