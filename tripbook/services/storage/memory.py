"""
In-Memory Audit Storage

Keeps events in a list. Suitable for tests and for single-process use
where the host application ships the trail elsewhere on its own.
"""

from typing import Optional
from uuid import UUID

from tripbook.models.audit import AuditEvent
from tripbook.services.storage.interface import (
    AuditStorageInterface,
    StorageFullError,
)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit storage backed by a Python list."""

    def __init__(self, max_events: Optional[int] = None):
        """
        Args:
            max_events: Refuse appends past this many events.
                        None means unbounded.
        """
        self._events: list[AuditEvent] = []
        self._max_events = max_events

    def append_event(self, event: AuditEvent) -> bool:
        if self._max_events is not None and len(self._events) >= self._max_events:
            raise StorageFullError(
                f"Audit storage is full ({self._max_events} events)"
            )
        self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]

    def __len__(self) -> int:
        return len(self._events)
