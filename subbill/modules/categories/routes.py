from fastapi import APIRouter, Depends, HTTPException
from subbill.config.categories import list_categories, get_category
from subbill.modules.services.routes import get_catalog_service
from subbill.modules.services.service import CatalogService
from typing import Optional

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def get_categories():
    return list_categories()


@router.get("/{slug}")
async def get_category_listing(
    slug: str,
    subcategory: Optional[str] = None,
    service: CatalogService = Depends(get_catalog_service)
):
    """Category with its active services, optionally narrowed to one subcategory"""
    category = get_category(slug)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return {
        **category,
        "selected_subcategory": subcategory,
        "services": service.list_services_by_category(category["slug"], subcategory),
    }
