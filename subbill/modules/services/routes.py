from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Query
from subbill.core.dependencies import get_request_supabase, get_session, require_user, require_admin
from subbill.modules.auth.schemas import Session
from subbill.modules.services.cache import PopularServicesCache
from subbill.modules.services.reactions import ReactionState
from subbill.modules.services.schemas import (
    ServiceResponse, ServiceUpdate, ServiceCreate, ActiveToggleRequest, RatingRequest,
    UserRating, PopularServicesResponse, SearchResponse, ImageUploadResponse
)
from subbill.modules.services.service import CatalogService, MIN_RATING, MAX_RATING
from supabase import Client
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["services"])

REACTION_FAILED = "Something went wrong. Please try again."


def get_popular_cache() -> PopularServicesCache:
    return PopularServicesCache()


def get_catalog_service(
    supabase: Client = Depends(get_request_supabase),
    cache: PopularServicesCache = Depends(get_popular_cache)
) -> CatalogService:
    return CatalogService(supabase, cache)


@router.get("/popular", response_model=PopularServicesResponse)
async def list_popular_services(
    limit: Optional[int] = None,
    service: CatalogService = Depends(get_catalog_service)
):
    """Popular services; served from the local cache when the backend is unreachable"""
    return service.get_popular_services(limit)


@router.get("/search", response_model=SearchResponse)
async def search_services(
    q: str = "",
    service: CatalogService = Depends(get_catalog_service)
):
    """Substring search over the popular list (title, category, subcategory)"""
    return service.search_services(q)


@router.get("/slug/{slug}", response_model=ServiceResponse)
async def get_service_by_slug(
    slug: str,
    count_view: bool = False,
    session: Session = Depends(get_session),
    service: CatalogService = Depends(get_catalog_service)
):
    """Service by slug. Inactive services are only visible to admins."""
    found = service.get_service_by_slug(slug)
    if not found or (found.is_active is False and not session.is_admin):
        raise HTTPException(status_code=404, detail="Service not found")
    if count_view and service.increment_service_views(found.id):
        found.views = (found.views or 0) + 1
    return found


@router.post("/{service_id}/views", status_code=200)
async def increment_views(
    service_id: str,
    service: CatalogService = Depends(get_catalog_service)
):
    return {"success": service.increment_service_views(service_id)}


@router.get("/{service_id}/related", response_model=List[ServiceResponse])
async def get_related_services(
    service_id: str,
    service: CatalogService = Depends(get_catalog_service)
):
    return service.get_related_services(service.get_service_by_id(service_id))


@router.get("/{service_id}/rating", response_model=UserRating)
async def get_user_rating(
    service_id: str,
    service: CatalogService = Depends(get_catalog_service)
):
    """The caller's like/dislike/rating for a service"""
    return service.get_user_rating(service_id)


@router.post("/{service_id}/like", response_model=ReactionState)
async def toggle_like(
    service_id: str,
    session: Session = Depends(require_user),
    service: CatalogService = Depends(get_catalog_service)
):
    """Toggle the caller's like. A like replaces an existing dislike."""
    state = ReactionState.from_service(service.get_service_by_id(service_id), service.get_user_rating(service_id))
    if not service.like_service(service_id, not state.liked):
        raise HTTPException(status_code=400, detail=REACTION_FAILED)
    return state.toggle_like()


@router.post("/{service_id}/dislike", response_model=ReactionState)
async def toggle_dislike(
    service_id: str,
    session: Session = Depends(require_user),
    service: CatalogService = Depends(get_catalog_service)
):
    """Toggle the caller's dislike. A dislike replaces an existing like."""
    state = ReactionState.from_service(service.get_service_by_id(service_id), service.get_user_rating(service_id))
    if not service.dislike_service(service_id, not state.disliked):
        raise HTTPException(status_code=400, detail=REACTION_FAILED)
    return state.toggle_dislike()


@router.post("/{service_id}/rate", response_model=ReactionState)
async def rate_service(
    service_id: str,
    body: RatingRequest,
    session: Session = Depends(require_user),
    service: CatalogService = Depends(get_catalog_service)
):
    if body.rating < MIN_RATING or body.rating > MAX_RATING:
        raise HTTPException(status_code=400, detail=f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    state = ReactionState.from_service(service.get_service_by_id(service_id), service.get_user_rating(service_id))
    if not service.rate_service(service_id, body.rating):
        raise HTTPException(status_code=400, detail=REACTION_FAILED)
    return state.with_rating(body.rating)


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(
    service_data: ServiceCreate,
    session: Session = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """Create a service (admin)"""
    return service.create_service(service_data)


@router.put("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    service_data: ServiceUpdate,
    session: Session = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """Edit a service (admin). Malformed features JSON is rejected before any write."""
    return service.edit_service(service_id, service_data)


@router.patch("/{service_id}/active", response_model=ServiceResponse)
async def toggle_service_active(
    service_id: str,
    body: ActiveToggleRequest,
    session: Session = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    return service.toggle_service_active(service_id, body.is_active)


@router.post("/images", response_model=ImageUploadResponse, status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    folder: str = Query("images"),
    session: Session = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """Upload a thumbnail or main image (admin)"""
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are accepted")
    content = await file.read()
    url = service.upload_image(content, file.filename, file.content_type, folder=folder)
    return ImageUploadResponse(url=url, folder=folder)
