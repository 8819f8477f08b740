"""
Tests for the audit logger and in-memory audit storage.
"""

import pytest

from tripbook.audit import AuditLogger, create_correlation_id
from tripbook.models.audit import AuditEventBuilder, AuditEventType
from tripbook.services.storage import InMemoryAuditStorage
from tripbook.services.storage.interface import StorageFullError


class TestInMemoryAuditStorage:
    """Tests for the list-backed audit storage."""

    def test_append_and_recent(self, audit_storage):
        audit_storage.append_event(AuditEventBuilder.trip_created("t1", "Spain"))
        audit_storage.append_event(AuditEventBuilder.trip_switched("t1"))

        recent = audit_storage.get_recent_events()
        assert len(audit_storage) == 2
        assert recent[0].event_type == AuditEventType.TRIP_SWITCHED
        assert audit_storage.get_recent_events(limit=1) == recent[:1]

    def test_query_by_entity(self, audit_storage):
        audit_storage.append_event(AuditEventBuilder.trip_created("t1", "Spain"))
        audit_storage.append_event(AuditEventBuilder.trip_created("t2", "Japan"))
        audit_storage.append_event(AuditEventBuilder.owner_added("t1", "alice", "Alice"))

        events = audit_storage.get_events_by_entity("trip", "t1")
        assert [e.event_type for e in events] == [AuditEventType.TRIP_CREATED]
        assert len(audit_storage.get_events_by_entity("owner", "alice")) == 1

    def test_query_by_correlation(self, audit_storage):
        correlation_id = create_correlation_id()
        audit_storage.append_event(AuditEventBuilder.external_service_error(
            "ocr", "timeout", correlation_id=correlation_id,
        ))
        audit_storage.append_event(AuditEventBuilder.trip_switched("t1"))

        events = audit_storage.get_events_by_correlation_id(correlation_id)
        assert len(events) == 1
        assert events[0].error_message == "timeout"

    def test_full_storage_raises(self):
        storage = InMemoryAuditStorage(max_events=1)
        storage.append_event(AuditEventBuilder.trip_switched("t1"))
        with pytest.raises(StorageFullError):
            storage.append_event(AuditEventBuilder.trip_switched("t2"))


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_log_persists(self, audit_logger, audit_storage):
        assert audit_logger.log(AuditEventBuilder.trip_created("t1", "Spain")) is True
        assert len(audit_storage) == 1
        assert audit_logger.storage is audit_storage

    def test_log_without_storage(self):
        """Test that a logger with no backend still accepts events."""
        logger = AuditLogger()
        assert logger.log(AuditEventBuilder.trip_created("t1", "Spain")) is True

    def test_storage_failure_does_not_raise(self):
        """Test that a failing backend never breaks the caller."""
        logger = AuditLogger(InMemoryAuditStorage(max_events=0))
        assert logger.log(AuditEventBuilder.trip_created("t1", "Spain")) is False

    def test_log_error(self, audit_logger, audit_storage):
        audit_logger.log_error("ValueError", "bad thing", details={"step": "import"})
        event = audit_storage.get_recent_events()[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.details == {"step": "import"}

    def test_log_external_service_error(self, audit_logger, audit_storage):
        correlation_id = create_correlation_id()
        audit_logger.log_external_service_error("exchange_rates", "503", correlation_id)
        event = audit_storage.get_recent_events()[0]
        assert event.event_type == AuditEventType.EXTERNAL_SERVICE_ERROR
        assert event.details["service"] == "exchange_rates"
        assert event.correlation_id == correlation_id


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
