from __future__ import annotations

from pydantic import BaseModel

from edu_service.domain.value_objects.enums import UserRole


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    role: UserRole = UserRole.STUDENT
    school_id: str | None = None


class UserOut(BaseModel):
    id: str
    name: str | None = None
    email: str
    role: UserRole


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserOut
    token: str
