from supabase import Client
from subbill.config import settings
from subbill.modules.services.schemas import (
    ServiceResponse, ServiceUpdate, ServiceCreate, UserRating,
    PopularServicesResponse, SearchResponse
)
from subbill.modules.services.features import parse_features
from subbill.modules.services.cache import PopularServicesCache
from subbill.modules.services.s3_storage import S3Storage
from typing import List, Optional, Dict, Any, Tuple
from fastapi import HTTPException
from datetime import datetime, timezone
import logging
import re
import time
import uuid

logger = logging.getLogger(__name__)

MIN_RATING = 0.5
MAX_RATING = 5.0

# Error text raised by the reaction rpc functions for anonymous callers
LOGIN_REQUIRED_MARKERS = ("로그인이 필요합니다", "login required")

IMAGE_FOLDERS = ("thumbnails", "images")

# (content, filename, content_type) for an uploaded image
ImageFile = Tuple[bytes, str, Optional[str]]


def _is_login_required(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in LOGIN_REQUIRED_MARKERS)


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or f"service-{uuid.uuid4().hex[:8]}"


def clean_filename(filename: str) -> str:
    return re.sub(r"[^a-zA-Z0-9.]", "_", filename or "image")


def filter_services(services: List[ServiceResponse], query: str) -> List[ServiceResponse]:
    """Case-insensitive substring match on title, category and subcategory"""
    needle = (query or "").strip().lower()
    if not needle:
        return list(services)
    return [
        s for s in services
        if needle in (s.title or "").lower()
        or needle in (s.category or "").lower()
        or needle in (s.subcategory or "").lower()
    ]


class CatalogService:
    def __init__(self, supabase: Client, cache: Optional[PopularServicesCache] = None):
        self.supabase = supabase
        self.cache = cache or PopularServicesCache()
        self.bucket = settings.storage_bucket

        # S3 replaces the Supabase Storage bucket when fully configured
        self.s3_storage = None
        if S3Storage.is_configured():
            try:
                self.s3_storage = S3Storage()
            except Exception as e:
                logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")

    # Lookups

    def get_service_by_slug(self, slug: str) -> Optional[ServiceResponse]:
        """First service with this slug, or None. Lookup errors are logged and treated as missing."""
        try:
            result = self.supabase.table("services")\
                .select("*")\
                .eq("slug", slug)\
                .execute()
            if not result.data:
                logger.info(f"No service with slug: {slug}")
                if logger.isEnabledFor(logging.DEBUG):
                    slugs = self.supabase.table("services").select("slug").execute()
                    logger.debug(f"Available slugs: {[s['slug'] for s in slugs.data or []]}")
                return None
            return ServiceResponse(**result.data[0])
        except Exception as e:
            logger.error(f"Error loading service by slug {slug}: {e}")
            return None

    def get_service_by_id(self, service_id: str) -> ServiceResponse:
        try:
            result = self.supabase.table("services")\
                .select("*")\
                .eq("id", service_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Service not found")
            return ServiceResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_services_by_category(self, category: str, subcategory: Optional[str] = None) -> List[ServiceResponse]:
        try:
            query = self.supabase.table("services")\
                .select("*")\
                .eq("category", category)\
                .eq("is_active", True)
            if subcategory:
                query = query.eq("subcategory", subcategory)
            result = query.order("rating", desc=True).execute()
            return [ServiceResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error listing services for category {category}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_related_services(self, service: ServiceResponse, limit: Optional[int] = None) -> List[ServiceResponse]:
        """Same category and subcategory first; falls back to same category. Errors give an empty list."""
        limit = limit or settings.related_services_limit
        try:
            result = self.supabase.table("services")\
                .select("*")\
                .eq("category", service.category)\
                .eq("subcategory", service.subcategory)\
                .eq("is_active", True)\
                .neq("id", service.id)\
                .limit(limit)\
                .execute()
            rows = result.data or []
            if not rows:
                result = self.supabase.table("services")\
                    .select("*")\
                    .eq("category", service.category)\
                    .eq("is_active", True)\
                    .neq("id", service.id)\
                    .limit(limit)\
                    .execute()
                rows = result.data or []
            return [ServiceResponse(**row) for row in rows]
        except Exception as e:
            logger.error(f"Error loading related services for {service.id}: {e}")
            return []

    # Popular list and search

    def get_popular_services(self, limit: Optional[int] = None) -> PopularServicesResponse:
        """Popular services from the rpc, written through to the local cache. The cache is only read on failure."""
        limit = limit or settings.popular_services_limit
        try:
            result = self.supabase.rpc("get_popular_services", {"limit_count": limit}).execute()
            rows = result.data or []
            self.cache.save(rows)
            return PopularServicesResponse(services=[ServiceResponse(**row) for row in rows])
        except Exception as e:
            logger.error(f"Error loading popular services, falling back to cache: {e}")
            cached = self.cache.load() or []
            return PopularServicesResponse(
                services=[ServiceResponse(**row) for row in cached],
                from_cache=True
            )

    def search_services(self, query: str) -> SearchResponse:
        popular = self.get_popular_services()
        results = filter_services(popular.services, query)
        return SearchResponse(
            query=query or "",
            results=results,
            empty=not results,
            from_cache=popular.from_cache,
            message=None if results else f'No services match "{(query or "").strip()}".'
        )

    # Counters and reactions (remote procedures)

    def increment_service_views(self, service_id: str) -> bool:
        try:
            self.supabase.rpc("increment_service_views", {"service_id": service_id}).execute()
            return True
        except Exception as e:
            logger.error(f"Error incrementing views for {service_id}: {e}")
            return False

    def get_user_rating(self, service_id: str) -> UserRating:
        try:
            result = self.supabase.rpc("get_user_rating", {"service_id": service_id}).execute()
            data = result.data
            if isinstance(data, list):
                data = data[0] if data else None
            if not data:
                return UserRating()
            return UserRating(**data)
        except Exception as e:
            logger.error(f"Error loading user rating for {service_id}: {e}")
            return UserRating()

    def like_service(self, service_id: str, value: bool = True) -> bool:
        try:
            result = self.supabase.rpc("toggle_service_like", {
                "service_id": service_id,
                "like_value": value
            }).execute()
            return bool(result.data)
        except Exception as e:
            if _is_login_required(e):
                logger.error("Liking a service requires login")
                return False
            logger.error(f"Error toggling like for {service_id}: {e}")
            return False

    def dislike_service(self, service_id: str, value: bool = True) -> bool:
        try:
            result = self.supabase.rpc("toggle_service_dislike", {
                "service_id": service_id,
                "dislike_value": value
            }).execute()
            return bool(result.data)
        except Exception as e:
            if _is_login_required(e):
                logger.error("Disliking a service requires login")
                return False
            logger.error(f"Error toggling dislike for {service_id}: {e}")
            return False

    def rate_service(self, service_id: str, rating: float) -> bool:
        if rating < MIN_RATING or rating > MAX_RATING:
            logger.error(f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}")
            return False
        try:
            result = self.supabase.rpc("rate_service", {
                "service_id": service_id,
                "rating_value": rating
            }).execute()
            return bool(result.data)
        except Exception as e:
            if _is_login_required(e):
                logger.error("Rating a service requires login")
                return False
            logger.error(f"Error rating service {service_id}: {e}")
            return False

    # Admin writes

    def update_service(self, service_id: str, updates: Dict[str, Any]) -> ServiceResponse:
        try:
            result = self.supabase.table("services")\
                .update(updates)\
                .eq("id", service_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Service not found")
            return ServiceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating service {service_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to update service: {str(e)}")

    def toggle_service_active(self, service_id: str, is_active: bool) -> ServiceResponse:
        return self.update_service(service_id, {"is_active": is_active})

    def edit_service(
        self,
        service_id: str,
        service_data: ServiceUpdate,
        thumbnail: Optional[ImageFile] = None,
        image: Optional[ImageFile] = None
    ) -> ServiceResponse:
        """Apply the admin editor form. Features are validated before anything is sent."""
        updates = service_data.model_dump(exclude_none=True, exclude={"features"})
        if service_data.features is not None:
            try:
                updates["features"] = parse_features(service_data.features)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        if thumbnail:
            updates["thumbnail_url"] = self.upload_image(*thumbnail, folder="thumbnails")
        if image:
            updates["image_url"] = self.upload_image(*image, folder="images")

        updates["updated_at"] = datetime.now(timezone.utc).isoformat()
        logger.info(f"Updating service {service_id}: {sorted(updates)}")
        return self.update_service(service_id, updates)

    def create_service(
        self,
        service_data: ServiceCreate,
        thumbnail: Optional[ImageFile] = None,
        image: Optional[ImageFile] = None
    ) -> ServiceResponse:
        row = service_data.model_dump()
        row["features"] = [f.strip() for f in service_data.features if f and f.strip()]
        row["slug"] = slugify(service_data.title)
        if thumbnail:
            row["thumbnail_url"] = self.upload_image(*thumbnail, folder="thumbnails")
        if image:
            row["image_url"] = self.upload_image(*image, folder="images")
        try:
            result = self.supabase.table("services").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create service")
            logger.info(f"Created service {row['slug']}")
            return ServiceResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "duplicate" in error_message.lower() or "unique" in error_message.lower():
                raise HTTPException(status_code=400, detail=f"A service with slug '{row['slug']}' already exists")
            raise HTTPException(status_code=500, detail=f"Failed to create service: {error_message}")

    def upload_image(self, content: bytes, filename: str, content_type: Optional[str] = None, folder: str = "images") -> str:
        """Upload a service image and return its public URL"""
        if folder not in IMAGE_FOLDERS:
            raise HTTPException(status_code=400, detail=f"Unknown image folder: {folder}")
        if not content:
            raise HTTPException(status_code=400, detail="Empty image file")
        content_type = content_type or "image/jpeg"
        file_path = f"{folder}/{int(time.time() * 1000)}_{clean_filename(filename)}"

        if self.s3_storage:
            logger.info(f"Uploading image to S3: {file_path}")
            try:
                public_url = self.s3_storage.upload_image(content, file_path, content_type)
            except Exception as e:
                raise HTTPException(status_code=500, detail=f"Image upload failed: {str(e)}")
        else:
            logger.info(f"Uploading image to Supabase Storage: {self.bucket}/{file_path}")
            try:
                self.supabase.storage.from_(self.bucket).upload(
                    file_path,
                    content,
                    file_options={"content-type": content_type, "cache-control": "3600", "upsert": "true"}
                )
                public_url = self.supabase.storage.from_(self.bucket).get_public_url(file_path)
            except Exception as e:
                logger.error(f"Supabase Storage upload failed: {str(e)}")
                raise HTTPException(status_code=500, detail=f"Image upload failed: {str(e)}")

        if not public_url or not str(public_url).startswith("http"):
            raise HTTPException(status_code=500, detail="Storage returned an invalid image URL")
        return public_url
