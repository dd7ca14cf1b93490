"""
Error taxonomy shared by services and routers.

Each class is an HTTPException with a fixed status code, so services raise
them the same way they would raise a plain HTTPException and FastAPI maps
them to responses without extra wiring.
"""

from fastapi import HTTPException
from starlette import status


class UnauthenticatedError(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, resource: str = "Resource", detail: str | None = None):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND,
                         detail=detail or f"{resource} not found")


class ValidationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
