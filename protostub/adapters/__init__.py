"""Adapters — service writer plugins and their registry.

Public re-exports for convenient access.
"""

from protostub.adapters.base import ServiceWriter
from protostub.adapters.mock import MockServiceWriter
from protostub.adapters.registry import WriterRegistry, default_registry

__all__ = [
    "MockServiceWriter",
    "ServiceWriter",
    "WriterRegistry",
    "default_registry",
]
