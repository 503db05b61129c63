from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    is_admin: bool = False


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: Optional[str] = None


class AdminRegisterRequest(RegisterRequest):
    admin_code: str


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class SetAdminStatusRequest(BaseModel):
    user_id: str
    is_admin: bool = True


class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None
    is_admin: bool = False
    user_metadata: Dict[str, Any] = {}
    app_metadata: Dict[str, Any] = {}

    @property
    def display_name(self) -> str:
        return self.user_metadata.get("full_name") or self.email or "User"


class Session(BaseModel):
    """Current request's auth state. Anonymous when user is None."""
    user: Optional[SessionUser] = None
    access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.is_admin)
