from fastapi import APIRouter, Path
from starlette import status
from utils.deps import db_dependency, admin_dependency
from schemas.sale_schemas import CreateSaleRequest, UpdateSaleRequest
from services.sale_service import SaleService
from services.notification_service import NotificationService


router = APIRouter(
    prefix="/api",
    tags=["sales"]
)


@router.get("/admin/sales", status_code=status.HTTP_200_OK)
async def list_sales(admin: admin_dependency, db: db_dependency):
    return {"sales": [SaleService.to_dict(s) for s in SaleService.list_sales(db)]}


@router.post("/admin/sales", status_code=status.HTTP_201_CREATED)
async def create_sale(body: CreateSaleRequest, admin: admin_dependency, db: db_dependency):
    sale = SaleService.create_sale(db, body)
    return {"success": True, "saleId": sale.id}


@router.get("/admin/sales/{sale_id}", status_code=status.HTTP_200_OK)
async def get_sale(admin: admin_dependency, db: db_dependency, sale_id: int = Path(gt=0)):
    return SaleService.to_dict(SaleService.get_sale(db, sale_id))


@router.put("/admin/sales/{sale_id}", status_code=status.HTTP_200_OK)
async def update_sale(body: UpdateSaleRequest, admin: admin_dependency, db: db_dependency,
                      sale_id: int = Path(gt=0)):
    SaleService.update_sale(db, sale_id, body)
    return {"success": True}


@router.delete("/admin/sales/{sale_id}", status_code=status.HTTP_200_OK)
async def delete_sale(admin: admin_dependency, db: db_dependency, sale_id: int = Path(gt=0)):
    SaleService.delete_sale(db, sale_id)
    return {"success": True}


@router.get("/sales/notifications", status_code=status.HTTP_200_OK)
async def sale_notifications(db: db_dependency):
    """Running sales shaped as notifications; computed on every call."""
    feed = NotificationService.sale_feed(db)
    return {"notifications": feed, "count": len(feed)}
