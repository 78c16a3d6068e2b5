# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, foreign key to auth.users.id)
- username: text (nullable, unique)
- full_name: text (nullable)
- avatar_url: text (nullable)
- email: text (nullable) - copied from auth.users for invite lookups
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
