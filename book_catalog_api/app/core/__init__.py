"""
Core infrastructure: settings, logging, database access, security and
the access‑control policy shared by every service.
"""
