"""
Storage Services Package

Provides the abstract audit storage interface and an in-memory
implementation. Designed so a persistent sink can be swapped in.
"""

from tripbook.services.storage.interface import (
    AuditStorageInterface,
    StorageError,
    StorageFullError,
)
from tripbook.services.storage.memory import InMemoryAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    # Exceptions
    "StorageError",
    "StorageFullError",
    # In-memory implementation
    "InMemoryAuditStorage",
]
