from pydantic import EmailStr, Field, field_validator
from schemas.base import CamelModel


class SignupRequest(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone_number: str = Field(min_length=3)
    address: str = Field(min_length=3)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.lower()


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.lower()
