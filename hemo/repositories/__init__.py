"""
Persistence adapters.

Services depend on the repository rather than on SQLAlchemy sessions.
"""
