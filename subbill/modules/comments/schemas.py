from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class CommentProfile(BaseModel):
    username: Optional[str] = None
    avatar_url: Optional[str] = None


class CommentCreate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: str
    service_id: str
    user_id: str
    content: str
    is_active: bool = True
    likes: Optional[int] = 0
    dislikes: Optional[int] = 0
    created_at: Optional[datetime] = None
    profiles: Optional[CommentProfile] = None

    class Config:
        from_attributes = True

    @property
    def author_name(self) -> str:
        if self.profiles and self.profiles.username:
            return self.profiles.username
        return "Anonymous"
