"""
utils/ - Shared Utilities
=========================
Logging setup and the day-file exception log.
"""
