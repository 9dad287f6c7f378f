from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator


# Users
class EmailPayload(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class UserCreate(EmailPayload):
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=128)
    confirm_password: str = Field(alias="confirmPassword", max_length=128)

    model_config = ConfigDict(populate_by_name=True)


class UserLogin(EmailPayload):
    password: str = Field(min_length=1, max_length=128)


class PasswordResetRequest(EmailPayload):
    pass


class PasswordResetConfirm(BaseModel):
    reset_token: str = Field(alias="resetToken", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=1, max_length=128)

    model_config = ConfigDict(populate_by_name=True)


class RegisterResponse(BaseModel):
    user: int


class LoginResponse(BaseModel):
    user: int
    role: str


class MessageResponse(BaseModel):
    message: str


class FormDescriptor(BaseModel):
    form: str
    action: str
    fields: list[str]
    reset_token: str | None = Field(default=None, serialization_alias="resetToken")


# Books
Isbn = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=32)]
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class BookBase(BaseModel):
    isbn: Isbn
    title: Title
    author: str = Field(min_length=1, max_length=255)
    publish_year: str = Field(min_length=3, max_length=4)
    page_count: int = Field(ge=1)
    genre: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=2000)
    stock: int = Field(ge=0)
    cover_image: str = Field(min_length=1, max_length=255)


class BookCreate(BookBase):
    pass


class BookOut(BookBase):
    id: int
    cover_image_path: str | None
    created_at: datetime | None
    updated_at: datetime | None

    model_config = ConfigDict(from_attributes=True)
