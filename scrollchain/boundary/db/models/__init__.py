"""ORM models."""

from scrollchain.boundary.db.models.kv_model import KeyValueModel

__all__ = ["KeyValueModel"]
