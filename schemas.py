from typing import Optional

from pydantic import BaseModel, EmailStr, Field, TypeAdapter, ValidationError, field_validator

from utils.security import MAX_PASSWORD_BYTES, password_too_long

email_adapter = TypeAdapter(EmailStr)


def normalize_email(value: str) -> Optional[str]:
    """Lowercased, validated email, or None when ``value`` is not an address"""
    try:
        return email_adapter.validate_python(value.strip()).lower()
    except ValidationError:
        return None


#################
# Pydantic Models
#################
class UserCreate(BaseModel):
    fullName: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("fullName")
    @classmethod
    def strip_name(cls, value: str):
        value = value.strip()
        if not value:
            raise ValueError("fullName must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str):
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str):
        if password_too_long(value):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ReactionRequest(BaseModel):
    type: Optional[str] = None


class CommentBody(BaseModel):
    text: Optional[str] = None
