"""
Transport adapters for the InsurAI engine.

Provides the async dashboard API client and the session stores holding its
bearer credential.
"""

from insurai_engine.transport.client import DashboardClient
from insurai_engine.transport.session import (
    FileSessionStore,
    InMemorySessionStore,
    SessionStore,
)

__all__ = [
    "DashboardClient",
    "FileSessionStore",
    "InMemorySessionStore",
    "SessionStore",
]
