"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy.

Note: Feature models are imported lazily to avoid circular imports.
Use direct imports from features/ modules when possible.
"""

from app.models.base import Base


def _get_run_models():
    """Lazy import of Run models."""
    from app.features.runs.models import Run
    return Run


def register_models() -> None:
    """Import every model so Base.metadata knows all tables."""
    _get_run_models()


__all__ = ["Base", "register_models"]
