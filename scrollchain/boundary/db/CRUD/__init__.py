"""CRUD operations."""

from scrollchain.boundary.db.CRUD.base_crud import BaseCRUD
from scrollchain.boundary.db.CRUD.kv_crud import KeyValueCRUD, kv_crud

__all__ = ["BaseCRUD", "KeyValueCRUD", "kv_crud"]
