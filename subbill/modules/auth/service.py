import hashlib
import logging
import time
from supabase import Client
from subbill.modules.auth.schemas import (
    LoginRequest, RegisterRequest, AdminRegisterRequest, TokenResponse,
    RegisterResponse, Session, SessionUser
)
from subbill.config import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (every page load resolves the session)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache(token: Optional[str] = None):
    if token is None:
        _AUTH_USER_CACHE.clear()
        return
    _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)


class AuthService:
    # Time for the on-signup trigger to create the profiles row
    PROFILE_SYNC_DELAY_SEC = 1.0

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest, extra_metadata: Optional[Dict[str, Any]] = None) -> RegisterResponse:
        """Register a new user using Supabase Auth"""
        try:
            user_metadata = {}
            if register_data.full_name:
                user_metadata["full_name"] = register_data.full_name
            if extra_metadata:
                user_metadata.update(extra_metadata)

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="Sign-up complete. Please check your email."
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            logger.error("Sign-up failed for %s: %s", register_data.email, error_message)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email,
                is_admin=self.is_admin(auth_response.user.id)
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error("Login failed: %s", error_message)
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def admin_login(self, login_data: LoginRequest) -> TokenResponse:
        """Login that only succeeds for accounts whose profile carries is_admin"""
        token = self.login(login_data)
        if not token.is_admin:
            logger.warning("Non-admin account %s tried the admin login", token.user_id)
            self.logout(token.access_token)
            raise HTTPException(status_code=403, detail="Admin privileges required")
        return token

    def admin_register(self, register_data: AdminRegisterRequest) -> RegisterResponse:
        """Register an admin account: code check, sign-up, then flag the profile as admin"""
        if not settings.admin_signup_code:
            raise HTTPException(status_code=403, detail="Admin sign-up is disabled")
        if register_data.admin_code != settings.admin_signup_code:
            raise HTTPException(status_code=400, detail="Invalid admin code")

        result = self.register(register_data, extra_metadata={"is_admin": True})

        if self.PROFILE_SYNC_DELAY_SEC:
            time.sleep(self.PROFILE_SYNC_DELAY_SEC)

        try:
            self.supabase.rpc("set_admin_status", {
                "user_id": result.user_id,
                "admin_status": True
            }).execute()
        except Exception as e:
            logger.error("set_admin_status rpc failed for %s, updating profile directly: %s", result.user_id, e)
            try:
                self.supabase.table("profiles")\
                    .update({"is_admin": True})\
                    .eq("id", result.user_id)\
                    .execute()
            except Exception as profile_error:
                logger.error("Profile update failed for %s: %s", result.user_id, profile_error)
                raise HTTPException(status_code=500, detail=f"Failed to grant admin status: {profile_error}")

        logger.info("Admin account created: %s", result.user_id)
        result.message = "Admin account created. Please check your email."
        return result

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def is_admin(self, user_id: str) -> bool:
        """True when the user's profiles row has is_admin = true"""
        try:
            result = self.supabase.table("profiles")\
                .select("is_admin")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            return bool(result and result.data and result.data.get("is_admin") is True)
        except Exception as e:
            logger.error("Error reading admin flag for %s: %s", user_id, e)
            return False

    def get_session(self, token: Optional[str]) -> Session:
        """Resolve the current session and its admin flag. Bad or missing tokens give an anonymous session."""
        if not token:
            return Session()
        try:
            user_data = self.get_current_user(token)
        except HTTPException as e:
            logger.info("Discarding session token: %s", e.detail)
            return Session()
        user = SessionUser(
            id=user_data["id"],
            email=user_data.get("email"),
            is_admin=self.is_admin(user_data["id"]),
            user_metadata=user_data.get("user_metadata") or {},
            app_metadata=user_data.get("app_metadata") or {},
        )
        return Session(user=user, access_token=token)

    def logout(self, token: str):
        """
        Drop the cached user for this token. Only local state is affected: the
        JWT stays valid at Supabase until it expires, and callers clear the
        session cookie themselves.
        """
        clear_auth_cache(token)
        logger.info("Session token discarded")

    def set_admin_status(self, user_id: str, is_admin: bool = True) -> bool:
        """Set is_admin on a profile through the set_admin_status rpc"""
        try:
            self.supabase.rpc("set_admin_status", {
                "user_id": user_id,
                "admin_status": is_admin
            }).execute()
            logger.info("Admin status for %s set to %s", user_id, is_admin)
            return True
        except Exception as e:
            logger.error("set_admin_status failed for %s: %s", user_id, e)
            raise HTTPException(
                status_code=500,
                detail=f"Failed to update admin status: {str(e)}"
            )
