"""
gifguard - Resilience layer for third-party GIF API calls.

Wraps unreliable asynchronous operations with retry-with-backoff,
failure classification and per-dependency circuit breakers.
"""

__version__ = "1.0.0"
