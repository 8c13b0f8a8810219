"""
Blog Backend: Application Package
===================================

A server-rendered blog: a handful of HTML pages, some of them filled with
posts read from PostgreSQL.

Architecture Note:

    ┌─────────────────────────────────────┐
    │        Routes (HTTP + HTML)         │  ← status codes, templates
    ├─────────────────────────────────────┤
    │      Services (Data Access)         │  ← queries, failure mapping
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
