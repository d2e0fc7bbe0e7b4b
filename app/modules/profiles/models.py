# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id on delete cascade)
- display_name: text (nullable)
- default_emails: text[] (nullable) - recipients pre-filled when sending an expense
- is_default_email: boolean (default: false) - send to default_emails without asking
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

RLS: select/insert/update only where auth.uid() = id. A row is normally
created by a signup trigger; the service creates it itself when missing.
"""
