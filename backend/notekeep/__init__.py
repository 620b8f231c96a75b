"""
NoteKeep Backend — Application Package Initializer
==================================================

What: Marks the `notekeep` directory as a Python package.
Why:  Enables module imports like `from notekeep.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Auth (token → AuthenticatedUser)  │  ← identity resolved before services run
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Note Store, Token Issuer
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services never see raw request data. The Note Store receives an
    already-verified AuthenticatedUser; the Token Issuer receives a
    username/password pair and nothing else.
"""

__version__ = "1.0.0"
