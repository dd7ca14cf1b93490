from fastapi import APIRouter
from starlette import status
from utils.deps import db_dependency, admin_dependency
from services.analytics_service import AnalyticsService


router = APIRouter(
    prefix="/api/admin/analytics",
    tags=["admin"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def get_analytics(admin: admin_dependency, db: db_dependency):
    return AnalyticsService.dashboard(db)
