"""
Seed Services Script
Populates the services table with the sample catalog from config.
Can be run manually after provisioning a fresh Supabase project.

Usage: python -m subbill.scripts.seed_services
"""

import sys
from datetime import datetime, timezone
from subbill.config.categories import SAMPLE_SERVICES, get_category
from subbill.database.supabase_client import SupabaseClient
from subbill.modules.services.service import slugify
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_services(supabase: Client, services=None):
    """Insert or update each sample service, matched by slug"""
    logger.info("Seeding services...")

    created_count = 0
    updated_count = 0

    for svc in services if services is not None else SAMPLE_SERVICES:
        if not get_category(svc["category"]):
            logger.warning(f"Skipping {svc['title']}: unknown category {svc['category']}")
            continue
        slug = svc.get("slug") or slugify(svc["title"])
        row = {
            "title": svc["title"],
            "slug": slug,
            "category": svc["category"],
            "subcategory": svc.get("subcategory"),
            "description": svc.get("description") or f"{svc['title']} subscription.",
            "price": svc.get("price"),
            "website": svc.get("website"),
            "features": svc.get("features", []),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            existing = supabase.table("services")\
                .select("id")\
                .eq("slug", slug)\
                .execute()

            if existing.data:
                supabase.table("services")\
                    .update(row)\
                    .eq("slug", slug)\
                    .execute()
                updated_count += 1
                logger.debug(f"Updated service: {slug}")
            else:
                supabase.table("services").insert({
                    **row,
                    "is_active": True,
                    "likes": 0,
                    "dislikes": 0,
                    "views": 0,
                    "rating": 0,
                }).execute()
                created_count += 1
                logger.debug(f"Created service: {slug}")
        except Exception as e:
            logger.error(f"Error processing service {slug}: {e}")

    logger.info(f"Services seeded: {created_count} created, {updated_count} updated")
    return created_count, updated_count


def main():
    logger.info("=" * 60)
    logger.info("Starting service seeding")
    logger.info("=" * 60)
    try:
        seed_services(SupabaseClient.get_service_client())
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        return 1
    logger.info("Seeding completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
