"""Relevance-ranked email search.

Matchers, filters and boosts are composed by ``SearchEngine``; the client
mirror offers a cheaper instant-preview ranking over in-memory threads.
"""

from .engine import SearchEngine
from .filters import build_filter, passes_filters

__all__ = ["SearchEngine", "build_filter", "passes_filters"]
