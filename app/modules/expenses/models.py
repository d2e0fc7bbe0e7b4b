# Supabase table: expenses
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
#
# RLS: select/insert/update/delete policies all check auth.uid() = user_id.
# Migration: add column deleted_at timestamptz NULL (soft delete).

"""
Expected Supabase table structure:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (foreign key to auth.users.id, not null)
- merchant: text (nullable)
- expense_date: date (nullable)
- total: numeric (nullable)
- currency: text (default: 'EUR')
- category: text (nullable)
- items: jsonb (nullable) - list of {"name": str, "quantity": number, "price": number}
- image_url: text (nullable) - public URL in the 'receipts' storage bucket
- vat_number: text (nullable)
- address: text (nullable)
- latitude: float (nullable)
- longitude: float (nullable)
- sent_to_email: text (nullable) - comma separated recipients of the last email
- sent_at: timestamptz (nullable)
- deleted_at: timestamptz (nullable) - set when soft-deleted, cleared on restore
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())

Storage bucket 'receipts' (public): objects live at <user_id>/<epoch_ms>.jpg
"""
