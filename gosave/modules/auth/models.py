# Supabase Auth + tables: users, memberships, orphaned_identities
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py and registration.py

"""
Supabase Auth (auth.users) owns credentials, password hashing, email
verification and session issuance. The application keeps its own profile row:

users:
- id: uuid (primary key)
- auth_user_id: uuid (references auth.users.id)
- email: text (unique, not null, lower-cased)
- full_name: text
- phone: text (nullable)
- role: text (admin | member | partner | viewer)
- status: text (active | suspended)
- membership_id: uuid (nullable, foreign key to memberships.id; null for viewer)
- membership_valid_until: date (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

memberships (reference data):
- id: uuid (primary key)
- name: text (basic | premium)
- price: numeric
- duration_months: integer

orphaned_identities (auth users whose profile insert failed):
- id: uuid (primary key)
- auth_user_id: uuid (not null)
- email: text
- reason: text
- status: text (pending_cleanup | resolved)
- created_at: timestamp (default: now())
- resolved_at: timestamp (nullable)
"""
