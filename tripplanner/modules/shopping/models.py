# Supabase tables: shopping_lists, shopping_list_items
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

shopping_lists:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- name: text (not null)
- description: text (nullable)
- created_by: uuid (foreign key to auth.users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

shopping_list_items:
- id: uuid (primary key)
- list_id: uuid (foreign key to shopping_lists.id, on delete cascade)
- name: text (not null)
- quantity: numeric (default: 1)
- unit: text (nullable)
- notes: text (nullable)
- category: text (nullable)
- assigned_to: uuid (nullable, foreign key to auth.users.id)
- is_purchased: boolean (default: false)
- purchased_by: uuid (nullable, foreign key to auth.users.id)
- purchased_at: timestamp (nullable)
- added_by: uuid (foreign key to auth.users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Items added from a recipe are linked through shopping_list_recipe_items
(documented in tripplanner/modules/recipes/models.py).
"""
