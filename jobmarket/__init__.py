"""
Job Market
A recruitment marketplace backend: talents search and apply to jobs,
companies publish postings and review applications.

Architecture:
- FastAPI routers per resource under /api
- SQLAlchemy Core over PostgreSQL (SQLite in tests)
- Stateless JWT access tokens plus rotating refresh tokens
"""

__version__ = "1.0.0"
