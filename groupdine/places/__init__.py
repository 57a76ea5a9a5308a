"""
Place-search provider integration.

Responsibilities:
- Issue text-search requests and follow result pages.
- Fetch per-place detail records (reviews, photos, links).
- Map provider status codes and HTTP failures onto the error taxonomy.
"""
