"""
Music DB API - Application Package Initializer
================================================

What: Marks the `musicdb` directory as a Python package.
Why:  Enables module imports like `from musicdb.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The service is a thin read-only layer over a single `tracks` table:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (Queries & Seeding)    │  ← filter building, lookups, reset
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine, ready state
    └─────────────────────────────────────┘

    Routes map query results to status codes; services never see HTTP objects.
"""

__version__ = "1.0.0"
