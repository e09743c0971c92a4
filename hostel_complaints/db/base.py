"""SQLAlchemy Base class for all models."""
from hostel_complaints.models.base.base_model import Base


def import_models():
    """Import all models to register them with SQLAlchemy."""
    import hostel_complaints.models  # noqa: F401

    return Base


__all__ = ["Base", "import_models"]
