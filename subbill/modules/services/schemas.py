from pydantic import BaseModel, Field
from typing import Optional, Any, List
from datetime import datetime


class ServiceResponse(BaseModel):
    id: str
    title: str
    slug: str
    category: str
    subcategory: Optional[str] = None
    description: Optional[str] = None
    features: Optional[Any] = None
    price: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = 0
    thumbnail_url: Optional[str] = None
    image_url: Optional[str] = None
    likes: Optional[int] = 0
    dislikes: Optional[int] = 0
    views: Optional[int] = 0
    is_active: Optional[bool] = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ServiceUpdate(BaseModel):
    title: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None
    price: Optional[str] = None
    website: Optional[str] = None
    # Raw JSON text from the edit form, or an already-parsed list/object
    features: Optional[Any] = None
    is_active: Optional[bool] = None


class ServiceCreate(BaseModel):
    title: str = Field(min_length=1)
    category: str
    subcategory: Optional[str] = None
    description: Optional[str] = None
    price: Optional[str] = None
    website: Optional[str] = None
    features: List[str] = []
    is_active: bool = True


class ActiveToggleRequest(BaseModel):
    is_active: bool


class RatingRequest(BaseModel):
    rating: float


class UserRating(BaseModel):
    liked: Optional[bool] = None
    disliked: Optional[bool] = None
    rating: Optional[float] = None
    is_logged_in: bool = False


class PopularServicesResponse(BaseModel):
    services: List[ServiceResponse]
    from_cache: bool = False


class SearchResponse(BaseModel):
    query: str
    results: List[ServiceResponse]
    empty: bool
    from_cache: bool = False
    message: Optional[str] = None


class ImageUploadResponse(BaseModel):
    url: str
    folder: str
