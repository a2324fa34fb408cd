"""
PageNotes Backend — Application Package
=========================================

A private, per-page notebook service: accounts with bearer tokens in front
of an append-only, owner-scoped note store.

    ┌─────────────────────────────────────┐
    │     Routes + Auth Gate (HTTP)       │  ← status codes, bearer tokens
    ├─────────────────────────────────────┤
    │  Services (accounts, tokens, notes) │  ← business rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
