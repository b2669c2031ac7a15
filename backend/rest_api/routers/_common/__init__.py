"""
Common utilities shared across routers.
"""

from .dependencies import get_caller, get_optional_caller
from .pagination import Pagination, get_pagination

__all__ = [
    # Caller dependencies
    "get_caller",
    "get_optional_caller",
    # Pagination
    "Pagination",
    "get_pagination",
]
