# Supabase tables: expenses, expense_participants, expense_payments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

expenses:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- name: text (not null)
- description: text (nullable)
- total_amount: numeric(12,2) (not null)
- currency: text (not null, default: 'USD')
- category: text (nullable)
- paid_by: uuid (foreign key to auth.users.id, not null)
- split_method: text (not null, default: 'equal') - values: equal, by_amount, by_percentage
- receipt_url: text (nullable)
- expense_date: timestamp (not null, default: now())
- created_by: uuid (foreign key to auth.users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

expense_participants:
- id: uuid (primary key)
- expense_id: uuid (foreign key to expenses.id, on delete cascade)
- user_id: uuid (foreign key to auth.users.id)
- amount_owed: numeric(12,2) (not null)
- is_settled: boolean (default: false)
- settled_at: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
- unique constraint on (expense_id, user_id)

expense_payments:
- id: uuid (primary key)
- expense_id: uuid (foreign key to expenses.id, on delete cascade)
- from_user: uuid (foreign key to auth.users.id)
- to_user: uuid (foreign key to auth.users.id)
- amount: numeric(12,2) (not null)
- payment_method: text (nullable)
- payment_date: timestamp (default: now())
- notes: text (nullable)
- created_by: uuid (foreign key to auth.users.id)
- created_at: timestamp (default: now())
"""
