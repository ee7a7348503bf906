from rawql_core.ports.adapter import IAdapter
from rawql_core.ports.middleware import IMiddleware
from rawql_core.ports.validation import IValidator

__all__ = [
    "IAdapter",
    "IMiddleware",
    "IValidator",
]
