# Supabase tables: recipes, recipe_ingredients, meal_plans, shopping_list_recipe_items
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

recipes:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- name: text (not null)
- description: text (nullable)
- servings: integer (not null, > 0)
- prep_time_minutes: integer (nullable)
- cook_time_minutes: integer (nullable)
- instructions: text[] (nullable)
- notes: text (nullable)
- created_by: uuid (foreign key to auth.users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

recipe_ingredients:
- id: uuid (primary key)
- recipe_id: uuid (foreign key to recipes.id, on delete cascade)
- name: text (not null)
- quantity: numeric (not null)
- unit: text (nullable) - one of tripplanner.core.units.COMMON_UNITS
- notes: text (nullable)
- category: text (nullable)
- optional: boolean (default: false)
- order_index: integer (not null)
- created_at: timestamp (default: now())

meal_plans:
- id: uuid (primary key)
- trip_id: uuid (foreign key to trips.id, on delete cascade)
- recipe_id: uuid (foreign key to recipes.id, on delete cascade)
- planned_date: date (not null)
- meal_type: text (not null) - values: breakfast, lunch, dinner, snack
- planned_servings: integer (not null)
- notes: text (nullable)
- assigned_cook: uuid (nullable, foreign key to auth.users.id)
- is_completed: boolean (default: false)
- created_by: uuid (foreign key to auth.users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

shopping_list_recipe_items (links shopping items back to the recipe they came from):
- id: uuid (primary key)
- shopping_list_item_id: uuid (foreign key to shopping_list_items.id, on delete cascade)
- recipe_id: uuid (foreign key to recipes.id, on delete cascade)
- meal_plan_id: uuid (nullable, foreign key to meal_plans.id)
- scaled_servings: integer
- original_quantity: numeric
- scaled_quantity: numeric
- created_at: timestamp (default: now())
"""
