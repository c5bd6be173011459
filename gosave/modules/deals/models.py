# Supabase table: deals
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- title: text (not null)
- description: text (not null)
- image_url: text (nullable)
- category: text (nullable)
- partner_id: uuid (foreign key to partners.id, not null)
- basic_discount: numeric (nullable) - percent offered to every member
- premium_discount: numeric (nullable) - percent offered to premium members
- start_date: timestamptz (not null)
- end_date: timestamptz (not null)
- created_by: uuid (foreign key to users.id)
- created_at: timestamp (default: now())

A deal is active while start_date <= now() <= end_date. A deal with a
premium_discount and no basic_discount is premium-only; callers below the
premium tier get it with premium_discount null and a fallback discount_text.
"""
