# Supabase Auth
# Sign-up, sign-in and JWT validation are delegated to Supabase Auth.
# The only table this service reads alongside it is `profiles`.

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (username is stored in user_metadata)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the current user from a JWT
- auth.sign_out() - Logout users

A database trigger on auth.users creates the matching `profiles` row
(id = auth.users.id, username copied from user_metadata).
"""
