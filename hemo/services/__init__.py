"""
High-level use cases for the Hemo API.

Each service module orchestrates repositories/adapters to implement business
rules (register, verify, login, edit profile). Routers call these services
instead of touching the database directly.
"""
