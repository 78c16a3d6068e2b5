# Supabase tables: date_proposals, destination_proposals, proposal_votes, proposal_discussions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

date_proposals:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- proposed_by: uuid (foreign key to auth.users.id)
- title: text (not null)
- start_date: date (not null)
- end_date: date (not null)
- notes: text (nullable)
- is_finalized: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

destination_proposals:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- date_proposal_id: uuid (nullable, foreign key to date_proposals.id, on delete set null)
- proposed_by: uuid (foreign key to auth.users.id)
- destination_name: text (not null)
- destination_description: text (nullable)
- destination_notes: text (nullable)
- is_finalized: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

proposal_votes:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- date_proposal_id: uuid (nullable, foreign key to date_proposals.id, on delete cascade)
- destination_proposal_id: uuid (nullable, foreign key to destination_proposals.id, on delete cascade)
- user_id: uuid (foreign key to auth.users.id)
- vote_type: text (not null) - values: available, maybe, unavailable
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
- unique constraints on (user_id, date_proposal_id) and (user_id, destination_proposal_id)
- check: exactly one of date_proposal_id / destination_proposal_id is set

proposal_discussions:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- date_proposal_id: uuid (nullable)
- destination_proposal_id: uuid (nullable)
- parent_comment_id: uuid (nullable, foreign key to proposal_discussions.id, on delete cascade)
- user_id: uuid (foreign key to auth.users.id)
- comment_text: text (not null)
- is_edited: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

A comment with neither proposal id belongs to the general trip discussion.
"""
