"""
Kinmu Django applications package.

This package contains all Django apps for the shift report system:
- core: Access control, duration arithmetic and template helpers
- accounts: Member profiles, invitations and member management
- scheduling: Planned schedules and the reports filed against them
- reports: Monthly work-hour aggregation for admins
"""
