"""
Utility modules for the clinic scheduler.

This package contains shared helpers: clinic-timezone datetime handling and
in-memory appointment filters.
"""
