# Supabase table: partners
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- brand_name: text (not null)
- owner_name: text (not null)
- email: text (unique, not null)
- phone: text (not null)
- website: text (nullable)
- logo_url: text (nullable)
- business_type: text (not null)
- address: text (not null)
- city: text (not null)
- min_discount: numeric (nullable)
- max_discount: numeric (nullable)
- contract_duration_months: integer (default: 12)
- status: text (pending | approved | rejected, default: pending)
- approved_by: uuid (nullable, foreign key to users.id) - reviewer for either outcome
- approved_at: timestamp (nullable) - review time for either outcome
- rejection_reason: text (nullable)
- admin_notes: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Status moves pending -> approved or pending -> rejected; both are terminal.
"""
