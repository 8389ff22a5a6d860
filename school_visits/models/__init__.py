# models/__init__.py
from .base import BaseModel
from .visit import Visit, VisitorType

__all__ = [
    'BaseModel',
    'Visit',
    'VisitorType',
]
