# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text - mirror of auth.users.email, patched by change_user_email
- role: text ('client' | 'admin') - source of truth for role assignment

auth.users (managed by Supabase Auth):
- raw_app_meta_data.role - authoritative role read by RLS policies and the
  admin guard; kept equal to profiles.role by sync_all_users_app_metadata
- raw_user_meta_data.role - legacy copy, only written when inviting

Profile rows are created and destroyed outside this service (signup
trigger, cascade on auth user delete).
"""
