# Supabase Auth
# Identity is owned entirely by Supabase Auth (auth.users). Users sign in
# with Google OAuth; this service only resolves bearer tokens to users.

"""
Supabase Auth provides:
- auth.sign_in_with_oauth() - Start the Google OAuth flow
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

The user's display name (user_metadata.full_name or user_metadata.name) and
email seed the lazily created row in public.profiles.
"""
