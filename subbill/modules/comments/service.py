from supabase import Client
from subbill.modules.comments.schemas import CommentResponse
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

COMMENT_SELECT = "*, profiles:user_id (username, avatar_url)"


class CommentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_comments(self, service_id: str, include_inactive: bool = False) -> List[CommentResponse]:
        """Newest first. Only admins pass include_inactive."""
        try:
            query = self.supabase.table("comments")\
                .select(COMMENT_SELECT)\
                .eq("service_id", service_id)
            if not include_inactive:
                query = query.eq("is_active", True)
            result = query.order("created_at", desc=True).execute()
            return [CommentResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error loading comments for service {service_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load comments")

    def create_comment(self, service_id: str, user_id: str, content: str) -> CommentResponse:
        content = (content or "").strip()
        if not content:
            raise HTTPException(status_code=400, detail="Comment cannot be empty")
        try:
            result = self.supabase.table("comments").insert({
                "service_id": service_id,
                "user_id": user_id,
                "content": content,
                "is_active": True
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to post comment")
            return CommentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error posting comment on service {service_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to post comment")

    def get_comment(self, comment_id: str) -> CommentResponse:
        try:
            result = self.supabase.table("comments")\
                .select("*")\
                .eq("id", comment_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Comment not found")
            return CommentResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def like_comment(self, comment_id: str) -> CommentResponse:
        """Read-then-write increment; concurrent likes can overwrite each other"""
        comment = self.get_comment(comment_id)
        if not comment.is_active:
            raise HTTPException(status_code=400, detail="Comment is not active")
        return self._update(comment_id, {"likes": (comment.likes or 0) + 1})

    def toggle_comment_active(self, comment_id: str) -> CommentResponse:
        comment = self.get_comment(comment_id)
        logger.info(f"Setting comment {comment_id} is_active={not comment.is_active}")
        return self._update(comment_id, {"is_active": not comment.is_active})

    def _update(self, comment_id: str, updates: dict) -> CommentResponse:
        try:
            result = self.supabase.table("comments")\
                .update(updates)\
                .eq("id", comment_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Comment not found")
            return CommentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating comment {comment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update comment")
