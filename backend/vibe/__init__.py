"""
Vibe Backend — Application Package Initializer
===============================================

What: Marks the `vibe` directory as a Python package.
Who:  Imported by uvicorn (`vibe.main:app`), Alembic and pytest.

Architecture Note:
    The backend is split in layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    Services (Business Logic)        │  ← Ownership checks, state rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Route modules (auth, users, posts, marketplace, video) do not talk to
    each other; the only shared state is the database.
"""

__version__ = "1.0.0"
