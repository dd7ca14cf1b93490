from utils.hashing import verify_password, hash_password
from models.users import User
from schemas.auth_schemas import SignupRequest
from sqlalchemy.orm import Session
from fastapi import HTTPException
from starlette import status
from core.exceptions import ConflictError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

class AuthService:

    @staticmethod
    def create_user(request: SignupRequest, db: Session) -> User:
        """
        Registers a customer account.

        Flow:
        1. Reject an email that is already registered
        2. Hash the password
        3. Store the user with role "user"
        """
        existing_user = db.query(User.id).filter(User.email == request.email).first()
        if existing_user:
            logger.warning(
                "Registration attempt with existing email",
                extra={"email": request.email}
            )
            raise ConflictError("Email already registered")

        model = User(
            name=request.name,
            email=request.email,
            password_hash=hash_password(request.password),
            phone=request.phone_number,
            address=request.address,
            role="user"
        )

        db.add(model)
        db.commit()
        db.refresh(model)

        logger.info(
            "User registered",
            extra={"user_id": model.id, "email": model.email}
        )

        return model


    @staticmethod
    def authenticate_user(email: str, password: str, db: Session) -> User:
        """
        Looks the user up by email and checks the password.

        Unknown email and wrong password give the same 401 so the response
        does not reveal which accounts exist.
        """
        user = db.query(User).filter(User.email == email.lower()).first()

        if not user:
            logger.warning(
                "Login failed - user not found",
                extra={"email": email}
            )
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password")

        if not verify_password(password, user.password_hash):
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "email": email}
            )
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password")

        logger.debug(
            "User authenticated successfully",
            extra={"user_id": user.id, "email": email}
        )

        return user


    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> User:
        model = db.query(User).filter(User.id == user_id).one_or_none()

        if not model:
            raise NotFoundError("User")

        return model
