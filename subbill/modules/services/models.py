# Supabase table: services
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- title: text (not null)
- slug: text (unique, not null)
- category: text (ai | productivity | media)
- subcategory: text (nullable)
- description: text (nullable)
- features: jsonb (nullable) - JSON array of strings, or an object of name -> detail
- price: text (nullable)
- website: text (nullable)
- rating: numeric (aggregated by rate_service)
- thumbnail_url: text (nullable) - public URL in the service-images bucket
- image_url: text (nullable) - public URL in the service-images bucket
- likes: integer (default: 0)
- dislikes: integer (default: 0)
- views: integer (default: 0)
- is_active: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Remote procedures (owned by the database, called as-is):
- increment_service_views(service_id uuid)
- get_user_rating(service_id uuid) -> {liked, disliked, rating, is_logged_in}
- toggle_service_like(service_id uuid, like_value boolean) -> boolean
- toggle_service_dislike(service_id uuid, dislike_value boolean) -> boolean
- rate_service(service_id uuid, rating_value numeric) -> boolean
- get_popular_services(limit_count integer) -> setof services

Storage bucket: service-images (thumbnails/, images/)
"""
