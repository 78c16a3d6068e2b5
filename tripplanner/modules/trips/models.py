# Supabase tables: trips, trip_members, trip_invitations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

trips:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- start_date: date (nullable)
- end_date: date (nullable)
- created_by: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

trip_members:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- user_id: uuid (foreign key to auth.users.id)
- role: text (not null, default: 'member') - values: owner, co-owner, member
- joined_at: timestamp (default: now())
- unique constraint on (trip_id, user_id)

trip_invitations:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- email: text (nullable) - restricts the invitation to one address when set
- token: text (unique, not null)
- expires_at: timestamp (not null)
- used_at: timestamp (nullable)
- created_by: uuid (foreign key to auth.users.id)
- created_at: timestamp (default: now())

Database functions (RPC):
- get_user_id_by_email(email) -> uuid | null
- create_trip_invitation(p_trip_id, p_email) -> {invitation_id, token, expires_at}
- use_trip_invitation(p_token, p_user_id) -> {success, trip_id, error_message}
"""
