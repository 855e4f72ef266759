"""
Infrastructure Layer - External integrations.

- cache: TTL result cache
- http: async HTTP client base
- providers: local and remote content providers
- store: local multi-tenant content store
"""
