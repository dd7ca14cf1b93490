from fastapi import APIRouter, Request, Response
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.auth_schemas import SignupRequest, LoginRequest
from services.auth_service import AuthService
from services.token_service import TokenService
from core.config import settings
from middleware.rate_limiter import limiter
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/auth",
    tags=["auth"]
)


@router.post("/signup", status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
async def signup(request: Request, body: SignupRequest, db: db_dependency):
    AuthService.create_user(body, db)
    return {"ok": True}


@router.post("/login", status_code=status.HTTP_200_OK)
@limiter.limit("5/minute")
async def login(request: Request, response: Response, body: LoginRequest, db: db_dependency):
    """
    Checks the credentials and stores a signed session token in the
    httpOnly auth cookie.
    """
    user = AuthService.authenticate_user(body.email, body.password, db)

    token = TokenService.create_access_token(user.id, user.email, user.role, user.name)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.AUTH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        **TokenService.cookie_options()
    )

    logger.info(
        "User logged in successfully",
        extra={"user_id": user.id, "email": user.email}
    )

    return {
        "ok": True,
        "user": {"id": user.id, "name": user.name, "email": user.email, "role": user.role}
    }


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME, **TokenService.cookie_options())
    return {"message": "Logged out successfully"}


@router.get("/me", status_code=status.HTTP_200_OK)
async def me(user: user_dependency, db: db_dependency):
    model = AuthService.get_user_by_id(db, user["user_id"])

    return {
        "user": {
            "id": model.id,
            "email": model.email,
            "name": model.name,
            "phone": model.phone,
            "address": model.address,
            "role": model.role
        }
    }
