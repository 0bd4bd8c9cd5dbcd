"""Database Metadata — SQLAlchemy declarative base shared by models and migrations.

Invariants:
    - Engines and sessions live in infrastructure/database.py, not here
"""
