from pydantic import EmailStr, Field

from hoarding_api.models.enums import ProfileStatus, Role
from hoarding_api.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    role: Role
    password: str = Field(min_length=6)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    phone: str | None = None
    location: str | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class UserAdminUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    role: Role | None = None


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    role: str
    phone: str | None = None
    location: str | None = None
    avatar: str | None = None
    created_at: str
    updated_at: str


class PhotographerResponse(CamelModel):
    id: str
    uid: str
    status: ProfileStatus
    assigned_hoardings: int
    photos_uploaded: int
    bio: str
    name: str
    email: str
    phone: str | None = None
    location: str | None = None
    avatar: str | None = None
    role: str


class ClientResponse(CamelModel):
    id: str
    uid: UserResponse
    contact_person: str
    status: ProfileStatus
    hoardings_count: int
    contracts_count: int
    created_at: str
    updated_at: str
