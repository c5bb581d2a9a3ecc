from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from todo_api.models import TodoPriority, TodoStatus

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# bcrypt only hashes the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

DataT = TypeVar("DataT")


def check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(CamelModel, Generic[DataT]):
    success: bool = True
    data: DataT


class RegisterRequest(CamelModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=8, max_length=MAX_PASSWORD_BYTES)
    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name is required")
        return value.strip()

    @field_validator("password")
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_bytes(value)


class LoginRequest(CamelModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("password")
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_bytes(value)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1, max_length=512)


class LogoutRequest(RefreshRequest):
    pass


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    created_at: datetime
    updated_at: datetime


class AuthResponse(CamelModel):
    token: str
    refresh_token: str
    user: UserOut


class TodoCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    priority: TodoPriority = TodoPriority.MEDIUM
    due_date: Optional[datetime] = None


class TodoUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[TodoPriority] = None
    status: Optional[TodoStatus] = None
    due_date: Optional[datetime] = None

    @field_validator("title", "priority", "status")
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class TodoOut(CamelModel):
    id: str
    user_id: str
    title: str
    description: Optional[str]
    priority: TodoPriority
    status: TodoStatus
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class PaginatedTodos(CamelModel):
    items: List[TodoOut]
    total: int
    page: int
    page_size: int
    total_pages: int
