from .base import BaseAdapter
from .memory import InMemoryAdapter

__all__ = [
    "BaseAdapter",
    "InMemoryAdapter",
]
