from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

T = TypeVar("T")


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


def _email_length(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > 100:
        raise ValueError("size must be between 0 and 100")
    return value


class WebResponse(BaseModel, Generic[T]):
    """Response envelope: exactly one of ``data``/``errors`` is populated."""

    data: Optional[T] = None
    errors: Optional[str] = None


class PagingResponse(BaseModel):
    """Paging metadata returned by search endpoints."""

    current_page: int
    total_pages: int
    size: int


class PagedResponse(WebResponse[List[T]], Generic[T]):
    """Envelope with a page of items and its paging metadata."""

    paging: Optional[PagingResponse] = None


class RegisterUserRequest(BaseModel):
    """Payload for registering a new user."""

    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=100)

    @field_validator("username", "password", "name")
    @classmethod
    def check_not_blank(cls, value):
        return _not_blank(value)


class UpdateUserRequest(BaseModel):
    """Schema for updating the current user (all fields optional)."""

    name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, max_length=100)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    name: str


class LoginUserRequest(BaseModel):
    """Credentials submitted to the login endpoint."""

    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=100)

    @field_validator("username", "password")
    @classmethod
    def check_not_blank(cls, value):
        return _not_blank(value)


class TokenResponse(BaseModel):
    """Issued API token and its expiry in epoch milliseconds."""

    token: str
    expired_at: int


class ContactCreate(BaseModel):
    """Schema for creating new contact."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("first_name")
    @classmethod
    def check_not_blank(cls, value):
        return _not_blank(value)

    @field_validator("email")
    @classmethod
    def check_email_length(cls, value):
        return _email_length(value)


class ContactUpdate(BaseModel):
    """Schema for updating contact (all fields optional)."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("first_name")
    @classmethod
    def check_not_blank(cls, value):
        return _not_blank(value)

    @field_validator("email")
    @classmethod
    def check_email_length(cls, value):
        return _email_length(value)


class ContactOut(BaseModel):
    """Schema for returning contact with ID."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class AddressCreate(BaseModel):
    """Schema for creating an address under a contact."""

    street: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    country: str = Field(min_length=1, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=10)

    @field_validator("country")
    @classmethod
    def check_not_blank(cls, value):
        return _not_blank(value)


class AddressUpdate(BaseModel):
    """Schema for updating an address (all fields optional)."""

    street: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=10)

    @field_validator("country")
    @classmethod
    def check_not_blank(cls, value):
        return _not_blank(value)


class AddressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    street: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: str
    postal_code: Optional[str] = None
