"""Resolver Clients used by the lookup orchestrator."""

from .base import ResolverClient, ResolverError
from .dnspython_client import DnsPythonResolver, ResolverConfig

__all__ = ["DnsPythonResolver", "ResolverClient", "ResolverConfig", "ResolverError"]
