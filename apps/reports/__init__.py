"""
Reports application.

Admin-only monthly view of filed work reports, grouped per member with the
total hours worked.
"""
