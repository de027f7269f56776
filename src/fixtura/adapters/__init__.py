"""Persistence adapters.

The SQLAlchemy adapters live in ``fixtura.adapters.sqlalchemy`` and need the
``sqlalchemy`` extra.
"""

from fixtura.adapters.base import ModelAdapter
from fixtura.adapters.object import ObjectAdapter
from fixtura.adapters.pydantic import PydanticAdapter

__all__ = [
    "ModelAdapter",
    "ObjectAdapter",
    "PydanticAdapter",
]
