from core.database import SessionLocal, get_engine
from core.config import settings
from core.exceptions import UnauthenticatedError, UnauthorizedError
from typing import Annotated, Optional
from fastapi import Depends
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session
from models.users import User
from services.token_service import TokenService
from utils.logger import get_logger

logger = get_logger(__name__)


def get_db():
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


auth_cookie = APIKeyCookie(name=settings.AUTH_COOKIE_NAME, auto_error=False)


def get_current_user(token: Annotated[Optional[str], Depends(auth_cookie)]):
    """
    Principal of the signed-in user, decoded from the auth cookie:
    ``{"user_id", "email", "user_role", "name"}``.
    """
    if not token:
        raise UnauthenticatedError()

    return TokenService.decode_access_token(token)

user_dependency = Annotated[dict, Depends(get_current_user)]


def get_optional_user(token: Annotated[Optional[str], Depends(auth_cookie)]):
    if not token:
        return None
    try:
        return TokenService.decode_access_token(token)
    except UnauthenticatedError:
        return None

optional_user_dependency = Annotated[Optional[dict], Depends(get_optional_user)]


def get_admin_user(user: user_dependency, db: db_dependency):
    """
    Same principal as get_current_user, after checking that the user row
    still exists and its role column is ``admin``. The role claim inside
    the token is not trusted for this.
    """
    role = db.query(User.role).filter(User.id == user["user_id"]).scalar()

    if role != "admin":
        logger.warning(
            "Admin access denied",
            extra={"user_id": user["user_id"], "role": role}
        )
        raise UnauthorizedError()

    return {**user, "user_role": role}

admin_dependency = Annotated[dict, Depends(get_admin_user)]
