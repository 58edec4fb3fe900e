"""
Transport package for cschema.

This package provides:
- The abstract schema transport interface
- An in-process simulated cluster transport
- A provider registry for creating transports from configuration
"""

from .base import SchemaTransport
from .memory import InMemoryTransport
from .factory import TransportFactory

__all__ = [
    "SchemaTransport",
    "InMemoryTransport",
    "TransportFactory",
]
