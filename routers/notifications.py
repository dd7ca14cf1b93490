from fastapi import APIRouter, Path
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.notification_schemas import CreateNotificationRequest, UpdateNotificationRequest
from services.notification_service import NotificationService


router = APIRouter(
    prefix="/api/notifications",
    tags=["notifications"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def list_notifications(user: user_dependency, db: db_dependency):
    return {
        "notifications": [
            NotificationService.to_dict(n)
            for n in NotificationService.list_for_user(db, user["user_id"])
        ]
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_notification(body: CreateNotificationRequest, user: user_dependency, db: db_dependency):
    notification = NotificationService.create(db, user["user_id"], body)
    return {"success": True, "notificationId": notification.id}


# declared before /{notification_id} so the literal path wins
@router.put("/mark-all-read", status_code=status.HTTP_200_OK)
async def mark_all_read(user: user_dependency, db: db_dependency):
    updated = NotificationService.mark_all_read(db, user["user_id"])
    return {"success": True, "updatedCount": updated}


@router.put("/{notification_id}", status_code=status.HTTP_200_OK)
async def update_notification(body: UpdateNotificationRequest, user: user_dependency, db: db_dependency,
                              notification_id: int = Path(gt=0)):
    NotificationService.set_read(db, user["user_id"], notification_id, body.is_read)
    return {"success": True}


@router.delete("/{notification_id}", status_code=status.HTTP_200_OK)
async def delete_notification(user: user_dependency, db: db_dependency, notification_id: int = Path(gt=0)):
    NotificationService.delete(db, user["user_id"], notification_id)
    return {"success": True}
