"""
Feature modules for Run Tracker.

Each feature is a self-contained module with:
- models.py - Domain dataclasses or SQLAlchemy models
- schemas.py - Pydantic schemas (optional)
- service.py / tracker.py - Business logic
- repository.py - Data access (optional)
"""
