"""
Audit Models for Tripbook

Every significant change to the trip store, and every call to an external
collaborator, is recorded as an audit event. This provides:
1. Traceability of who changed what trip and when
2. Visibility into mutations that were refused (last trip, shared owner)
3. Debugging information when a receipt scan or rate fetch goes wrong

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import csv
import io
import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from tripbook.models.trip import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Trip lifecycle
    TRIP_CREATED = "trip_created"
    TRIP_DELETED = "trip_deleted"
    TRIP_DELETE_REFUSED = "trip_delete_refused"
    TRIP_SWITCHED = "trip_switched"
    TRIP_SWITCH_IGNORED = "trip_switch_ignored"
    TRIP_DUPLICATED = "trip_duplicated"
    TRIP_IMPORTED = "trip_imported"
    IMPORT_FAILED = "import_failed"

    # Owners and expenses
    OWNER_ADDED = "owner_added"
    OWNER_REMOVED = "owner_removed"
    OWNER_REMOVE_REFUSED = "owner_remove_refused"
    EXPENSE_REJECTED = "expense_rejected"

    # Receipt scanning
    TEXT_RECOGNIZED = "text_recognized"
    AMOUNT_EXTRACTED = "amount_extracted"
    AMOUNT_NOT_FOUND = "amount_not_found"

    # Exchange rates
    RATES_FETCHED = "rates_fetched"
    RATES_FETCH_FAILED = "rates_fetch_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details",
    "error_message",
    "is_user_action",
]


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'trip', 'owner', 'scan')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one receipt scan)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> list:
        """
        Convert to a flat row, columns in AUDIT_COLUMNS order.
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


def events_to_csv(events: list[AuditEvent]) -> str:
    """Render events as CSV with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(AUDIT_COLUMNS)
    for event in events:
        writer.writerow(event.to_row())
    return buffer.getvalue()


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.trip_created(trip_id, name)
        event = AuditEventBuilder.owner_remove_refused(trip_id, "shared")
    """

    @staticmethod
    def trip_created(trip_id: str, trip_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_CREATED,
            entity_type="trip",
            entity_id=trip_id,
            description=f"Trip created: {trip_name}",
            details={"trip_name": trip_name},
            is_user_action=True,
        )

    @staticmethod
    def trip_deleted(trip_id: str, new_current_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_DELETED,
            entity_type="trip",
            entity_id=trip_id,
            description="Trip deleted",
            details={"current_trip_id": new_current_id},
            is_user_action=True,
        )

    @staticmethod
    def trip_delete_refused(trip_id: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_DELETE_REFUSED,
            severity=AuditSeverity.WARNING,
            entity_type="trip",
            entity_id=trip_id,
            description=f"Trip deletion refused: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def trip_switched(trip_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_SWITCHED,
            entity_type="trip",
            entity_id=trip_id,
            description="Active trip switched",
            is_user_action=True,
        )

    @staticmethod
    def trip_switch_ignored(trip_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_SWITCH_IGNORED,
            severity=AuditSeverity.WARNING,
            entity_type="trip",
            entity_id=trip_id,
            description="Switch to unknown trip ignored",
        )

    @staticmethod
    def trip_duplicated(source_id: str, copy_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_DUPLICATED,
            entity_type="trip",
            entity_id=copy_id,
            description="Trip duplicated",
            details={"source_trip_id": source_id},
            is_user_action=True,
        )

    @staticmethod
    def trip_imported(trip_ids: list[str], version: Optional[int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_IMPORTED,
            entity_type="trip",
            entity_id=trip_ids[0] if trip_ids else None,
            description=f"Imported {len(trip_ids)} trip(s)",
            details={"trip_ids": trip_ids, "version": version},
            is_user_action=True,
        )

    @staticmethod
    def import_failed(reason: str, details: Optional[dict] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="snapshot",
            description=f"Import failed: {reason}"[:500],
            error_message=reason,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def owner_added(trip_id: str, owner_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OWNER_ADDED,
            entity_type="owner",
            entity_id=owner_id,
            description=f"Owner added: {name}",
            details={"trip_id": trip_id},
            is_user_action=True,
        )

    @staticmethod
    def owner_removed(trip_id: str, owner_id: str, reassigned: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OWNER_REMOVED,
            entity_type="owner",
            entity_id=owner_id,
            description=f"Owner removed, {reassigned} expense(s) moved to shared",
            details={"trip_id": trip_id, "reassigned_expenses": reassigned},
            is_user_action=True,
        )

    @staticmethod
    def owner_remove_refused(trip_id: str, owner_id: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OWNER_REMOVE_REFUSED,
            severity=AuditSeverity.WARNING,
            entity_type="owner",
            entity_id=owner_id,
            description=f"Owner removal refused: {reason}",
            details={"trip_id": trip_id, "reason": reason},
        )

    @staticmethod
    def expense_rejected(trip_id: str, expense_id: str, owner: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense rejected: unknown owner '{owner}'",
            details={"trip_id": trip_id, "owner": owner},
        )

    @staticmethod
    def text_recognized(
        scan_id: UUID,
        char_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TEXT_RECOGNIZED,
            entity_type="scan",
            entity_id=str(scan_id),
            correlation_id=correlation_id,
            description=f"Receipt text recognised ({char_count} characters)",
            details={"char_count": char_count},
        )

    @staticmethod
    def amount_extracted(
        scan_id: UUID,
        amount: str,
        currency: str,
        is_fallback: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AMOUNT_EXTRACTED,
            entity_type="scan",
            entity_id=str(scan_id),
            correlation_id=correlation_id,
            description=f"Amount extracted: {amount} {currency}",
            details={
                "amount": amount,
                "currency": currency,
                "is_fallback": is_fallback,
            },
        )

    @staticmethod
    def amount_not_found(
        scan_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AMOUNT_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="scan",
            entity_id=str(scan_id),
            correlation_id=correlation_id,
            description="No amount found on receipt, manual entry required",
        )

    @staticmethod
    def rates_fetched(base: str, currencies: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATES_FETCHED,
            entity_type="exchange_rates",
            description=f"Exchange rates fetched for base {base}",
            details={"base": base, "currencies": currencies},
        )

    @staticmethod
    def rates_fetch_failed(error_message: str, used_fallback: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATES_FETCH_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="exchange_rates",
            description=f"Exchange rate fetch failed, using {used_fallback} rates",
            error_message=error_message,
            details={"fallback": used_fallback},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
