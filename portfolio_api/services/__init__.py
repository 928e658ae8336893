"""
Use cases for the portfolio API.

Each service orchestrates the SQL repository to implement business rules
(resolve a login, provision a configuration, reorder sections, etc.).
Routers call these services instead of touching the database directly.
"""
