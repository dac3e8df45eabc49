"""
Domain layer - Error vocabulary shared by the resilience core and its callers.

This layer contains:
- Error kinds produced at API boundaries
- Domain exceptions

IMPORTANT: This layer must NOT depend on infrastructure or adapters.
"""
