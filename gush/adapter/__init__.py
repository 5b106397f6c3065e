# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Hosting-provider adapters behind one normalized contract.
"""

from .base import Adapter, Capability
from .exceptions import (
    AdapterError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    TransportError,
    UnauthorizedError,
    UnsupportedOperationError,
)
from .factory import ADAPTERS, create_adapter, detect_adapter_name

__all__ = [
    'ADAPTERS',
    'Adapter',
    'AdapterError',
    'Capability',
    'ConflictError',
    'NotFoundError',
    'RateLimitError',
    'TransportError',
    'UnauthorizedError',
    'UnsupportedOperationError',
    'create_adapter',
    'detect_adapter_name',
]
