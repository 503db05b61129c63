# Supabase table: comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- service_id: uuid (foreign key to services.id, not null)
- user_id: uuid (foreign key to profiles.id, not null)
- content: text (not null)
- is_active: boolean (default: true) - false hides the comment from non-admins
- likes: integer (default: 0)
- dislikes: integer (default: 0)
- created_at: timestamp (default: now())

Reads embed the author's profile: profiles:user_id (username, avatar_url)
"""
