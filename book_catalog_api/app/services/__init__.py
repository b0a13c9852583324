"""
Service layer abstraction.

Each service encapsulates business logic for a domain and talks to
SQLite through ``core.db``.  Mutations pass through the policy gate in
``core.policy`` before anything is written.
"""
