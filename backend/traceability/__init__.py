"""
Traceability API — Application Package Initializer
===================================================

What: Marks the `traceability` directory as a Python package.
Why:  Enables module imports like `from traceability.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The service is a thin layered stack over one relational database:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │       Services (TraceService)       │  ← Presence checks, ID generation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine owned by app.state
    └─────────────────────────────────────┘

    Every request maps to exactly one parameterized SQL statement.
"""

__version__ = "1.0.0"
