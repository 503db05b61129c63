# Supabase Auth + profiles table
# This module uses Supabase's built-in authentication system.
# The admin flag lives in a public profiles table created by a trigger on auth.users.

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- username: text (nullable)
- avatar_url: text (nullable)
- is_admin: boolean (default: false)

Remote procedures used:
- set_admin_status(user_id uuid, admin_status boolean)

Supabase Auth provides:
- auth.sign_up() - Register new users (full_name / is_admin go into user_metadata)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
"""
