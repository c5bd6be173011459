# Supabase tables: users, payments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# The users table is described with the auth module (gosave/modules/auth/models.py)

"""
Expected Supabase table structure:

payments:
- id: uuid (primary key)
- user_id: uuid (foreign key to users.id, not null)
- membership_id: uuid (foreign key to memberships.id, not null)
- amount: numeric (not null)
- status: text (e.g. pending | completed | failed)
- payment_method: text (nullable)
- created_at: timestamp (default: now())

Users are never hard-deleted; admins change status to suspended instead.
"""
