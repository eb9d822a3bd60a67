"""
Search handlers - Pluggable query processors.

Each handler checks if it can handle a query and returns typed rows.
"""

from .est_search import EstSearchHandler
from .mentions import MentionHandler

__all__ = [
    "EstSearchHandler",
    "MentionHandler",
]
