"""Adapters — bindings to host tools and the filesystem.

Public re-exports for convenient access.
"""

from dabootstrap.adapters.base import Adapter, ExecutionContext
from dabootstrap.adapters.mock import MockAdapter, simulated_host
from dabootstrap.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
    "simulated_host",
]
