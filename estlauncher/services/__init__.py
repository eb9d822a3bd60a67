# Est Launcher Services Package
"""
Backend services for the Est launcher.

Services talk to the network: suggestion providers and the Est engine catalog.
"""

from .catalog import EngineCatalogService, filter_engines
from .suggestions import ProviderChoice, SuggestionService, fetch_suggestions, select_provider

__all__ = [
    "EngineCatalogService",
    "filter_engines",
    "ProviderChoice",
    "SuggestionService",
    "fetch_suggestions",
    "select_provider",
]
