"""
JobPortal
Job board backend: accounts, job postings, applications,
alumni chapters, admin console and career tools.

Architecture:
- Relational store (PostgreSQL in production) via SQLAlchemy Core
- JWT authentication with role gates
- Outbound email through the Resend HTTP API
"""

__version__ = "1.0.0"
