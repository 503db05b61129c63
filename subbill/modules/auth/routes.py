from fastapi import APIRouter, Depends
from subbill.database.supabase_client import get_auth_supabase
from subbill.modules.auth.schemas import (
    LoginRequest, RegisterRequest, AdminRegisterRequest, TokenResponse,
    RegisterResponse, SetAdminStatusRequest, Session
)
from subbill.modules.auth.service import AuthService
from subbill.core.dependencies import get_session, get_request_supabase, require_user, require_admin
from supabase import Client

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(supabase: Client = Depends(get_auth_supabase)) -> AuthService:
    return AuthService(supabase)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/admin/register", response_model=RegisterResponse, status_code=201)
def admin_register(
    register_data: AdminRegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register an admin account (requires the admin sign-up code)"""
    return service.admin_register(register_data)


@router.post("/admin/login", response_model=TokenResponse)
async def admin_login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login for the admin panel; rejects accounts without the admin flag"""
    return service.admin_login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    session: Session = Depends(require_user),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and drop the cached session"""
    service.logout(session.access_token)
    return {"message": "Logged out successfully"}


@router.get("/session")
async def get_current_session(session: Session = Depends(get_session)):
    """Current user and admin flag, or an anonymous session"""
    return {
        "is_authenticated": session.is_authenticated,
        "is_admin": session.is_admin,
        "user": session.user.model_dump() if session.user else None,
    }


@router.post("/set-admin-status", status_code=200)
async def set_admin_status(
    request: SetAdminStatusRequest,
    session: Session = Depends(require_admin),
    supabase: Client = Depends(get_request_supabase)
):
    """Grant or revoke admin status (requires current user to be an admin)"""
    AuthService(supabase).set_admin_status(request.user_id, request.is_admin)
    return {
        "message": f"User {request.user_id} admin status set to {request.is_admin}",
        "user_id": request.user_id,
        "is_admin": request.is_admin
    }
