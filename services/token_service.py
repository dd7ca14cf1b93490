from datetime import datetime, timezone, timedelta
from jose import jwt, JWTError
from core.config import settings
from core.exceptions import UnauthenticatedError


class TokenService:
    """
    Issues and reads the signed session token stored in the auth cookie.
    """

    @staticmethod
    def create_access_token(user_id: int, email: str, role: str, name: str,
                            expires_delta: timedelta | None = None) -> str:
        """
        Creates a JWT carrying ``{sub, email, role, name, exp}``.

        ``sub`` is the user id as a string (JWT requires a string subject).
        The default lifetime is AUTH_TOKEN_EXPIRE_DAYS (7 days).
        """
        if expires_delta is None:
            expires_delta = timedelta(days=settings.AUTH_TOKEN_EXPIRE_DAYS)

        payload = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "name": name,
            "exp": datetime.now(timezone.utc) + expires_delta
        }

        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_access_token(token: str) -> dict:
        """
        Validates signature and expiry and returns the principal:
        ``{"user_id", "email", "user_role", "name"}``.

        Raises:
            UnauthenticatedError: token is malformed, expired or incomplete
        """
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            raise UnauthenticatedError("Invalid token")

        subject = payload.get("sub")
        if subject is None or not str(subject).isdigit():
            raise UnauthenticatedError("Invalid token")

        return {
            "user_id": int(subject),
            "email": payload.get("email"),
            "user_role": payload.get("role"),
            "name": payload.get("name")
        }

    @staticmethod
    def cookie_options() -> dict:
        """Attributes of the auth cookie, shared by login and logout."""
        return {
            "httponly": True,
            "samesite": "lax",
            "secure": settings.ENV == "production",
            "path": "/"
        }
