# Supabase tables: user_availability, trip_user_availability
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_availability (personal calendar, shared across trips):
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- date: date (not null)
- availability_status: text (not null) - values: available, unavailable, maybe
- notes: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
- unique constraint on (user_id, date)

trip_user_availability (per-trip overrides and synced copies):
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- user_id: uuid (foreign key to auth.users.id, not null)
- date: date (not null)
- availability_status: text (not null) - values: available, unavailable, maybe
- override_reason: text (nullable)
- synced_from_central: boolean (default: false)
- last_sync_date: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
- unique constraint on (trip_id, user_id, date)
"""
