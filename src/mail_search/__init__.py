"""Mail Search - relevance-ranked search over a user's email threads.

This package provides the search engine (exact, semantic and fuzzy matching,
filters and importance boosting), suggestions and analytics, an
owner-scoped storage layer and an HTTP boundary.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from mail_search.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__", "__author__"]
