"""
Search index connector package.
"""

from .client import ElasticsearchClient, SearchIndex
from .models import SearchIndexError

__all__ = [
    "ElasticsearchClient",
    "SearchIndex",
    "SearchIndexError",
]
