"""
Application Layer - Use cases orchestrating domain and infrastructure.

- search: aggregation, suggestions, invalidation
- sitemap: network page trees
"""
