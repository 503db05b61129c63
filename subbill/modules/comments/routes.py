from fastapi import APIRouter, Depends
from subbill.core.dependencies import get_request_supabase, get_session, require_user, require_admin
from subbill.modules.auth.schemas import Session
from subbill.modules.comments.schemas import CommentCreate, CommentResponse
from subbill.modules.comments.service import CommentService
from supabase import Client
from typing import List

router = APIRouter(tags=["comments"])


def get_comment_service(supabase: Client = Depends(get_request_supabase)) -> CommentService:
    return CommentService(supabase)


@router.get("/services/{service_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    service_id: str,
    session: Session = Depends(get_session),
    service: CommentService = Depends(get_comment_service)
):
    """Comments for a service; admins also see deactivated ones"""
    return service.list_comments(service_id, include_inactive=session.is_admin)


@router.post("/services/{service_id}/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    service_id: str,
    body: CommentCreate,
    session: Session = Depends(require_user),
    service: CommentService = Depends(get_comment_service)
):
    return service.create_comment(service_id, session.user.id, body.content)


@router.post("/comments/{comment_id}/like", response_model=CommentResponse)
async def like_comment(
    comment_id: str,
    session: Session = Depends(require_user),
    service: CommentService = Depends(get_comment_service)
):
    return service.like_comment(comment_id)


@router.post("/comments/{comment_id}/toggle-active", response_model=CommentResponse)
async def toggle_comment_active(
    comment_id: str,
    session: Session = Depends(require_admin),
    service: CommentService = Depends(get_comment_service)
):
    """Hide or restore a comment (admin)"""
    return service.toggle_comment_active(comment_id)
