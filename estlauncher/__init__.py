# Est Launcher Package
"""
Launcher-side query interpreter for the Est meta-search server.

Parts:
  - Query parsing: @mention prefix + search content
  - Suggestions: live autocomplete from Google or DuckDuckGo
  - URLs: search targets that keep the mention on accepted suggestions
  - Engine catalog: named engines available for @mentions
"""

__version__ = "0.1.0-dev"
