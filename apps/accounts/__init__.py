"""
Accounts application.

Member profiles (full name, email, admin flag) attached to Django auth
accounts, the invitation sign-in flow, and the admin member management page.
"""
