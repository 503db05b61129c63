"""
Core dependencies for session resolution and route protection
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from subbill.config import settings
from subbill.database.supabase_client import SupabaseClient, get_supabase
from subbill.modules.auth.schemas import Session
from subbill.modules.auth.service import AuthService
from supabase import Client
from typing import Iterator, Optional
import logging

logger = logging.getLogger(__name__)

# Pages authenticate with a cookie, so a missing Authorization header is not an error
security = HTTPBearer(auto_error=False)


def get_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[str]:
    """Bearer token for API clients, session cookie for browser pages"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name)


def get_request_supabase(token: Optional[str] = Depends(get_access_token)) -> Iterator[Client]:
    """
    Client that acts as the signed-in user when there is one, anon otherwise.
    The user client lives for one request and is closed afterwards.
    """
    if not token:
        yield get_supabase()
        return
    client = SupabaseClient.get_user_client(token)
    try:
        yield client
    finally:
        SupabaseClient.close_client(client)


def get_session(
    token: Optional[str] = Depends(get_access_token),
    supabase: Client = Depends(get_request_supabase)
) -> Session:
    """Current session plus derived admin flag"""
    return AuthService(supabase).get_session(token)


def require_user(session: Session = Depends(get_session)) -> Session:
    if not session.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login required"
        )
    return session


def require_admin(session: Session = Depends(require_user)) -> Session:
    if not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return session
