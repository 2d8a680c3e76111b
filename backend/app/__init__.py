"""
Customer Details Backend — Application Package
================================================

Layered architecture:

    ┌─────────────────────────────────────┐
    │    Routes + auth dependencies       │  ← HTTP, versioning, role checks
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← login, edit, distance, search, listings
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
