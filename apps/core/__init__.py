"""
Core application for Kinmu.

Shared functionality used across the other apps:
- The access control gate (member / admin guards)
- Work duration arithmetic
- Navigation context processor
- Template filters
"""
