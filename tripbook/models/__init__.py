"""
Data Models Package

This package contains all Pydantic models used in Tripbook.
All data flowing through the store and the aggregation engine
must conform to these schemas.
"""

from tripbook.models.trip import (
    AMOUNT_QUANTUM,
    SHARED_OWNER_ID,
    AccommodationInfo,
    ActivityExpense,
    ActivityType,
    BookingInfo,
    Content,
    Currency,
    DayPlan,
    Destination,
    ExpenseCategory,
    FlightInfo,
    ImmigrationSchedule,
    ImmigrationType,
    InterCityTransport,
    MediaItem,
    MediaType,
    OwnerConfig,
    PendingCameraExpense,
    RestaurantComment,
    ScheduledActivity,
    TransportType,
    Trip,
    TripDraft,
    TripExpense,
    default_owners,
    parse_duration_minutes,
    quantize_amount,
)
from tripbook.models.budget import (
    BudgetSummary,
    CategoryTotal,
    DayCost,
    OwnerDeviation,
    OwnerShare,
    PairwiseTransfer,
    Settlement,
    SettlementKind,
)
from tripbook.models.receipt import CameraScanResult, ExtractedAmount
from tripbook.models.validation import ValidationIssue, ValidationResult
from tripbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Trip models
    "AMOUNT_QUANTUM",
    "SHARED_OWNER_ID",
    "AccommodationInfo",
    "ActivityExpense",
    "ActivityType",
    "BookingInfo",
    "Content",
    "Currency",
    "DayPlan",
    "Destination",
    "ExpenseCategory",
    "FlightInfo",
    "ImmigrationSchedule",
    "ImmigrationType",
    "InterCityTransport",
    "MediaItem",
    "MediaType",
    "OwnerConfig",
    "PendingCameraExpense",
    "RestaurantComment",
    "ScheduledActivity",
    "TransportType",
    "Trip",
    "TripDraft",
    "TripExpense",
    "default_owners",
    "parse_duration_minutes",
    "quantize_amount",
    # Budget models
    "BudgetSummary",
    "CategoryTotal",
    "DayCost",
    "OwnerDeviation",
    "OwnerShare",
    "PairwiseTransfer",
    "Settlement",
    "SettlementKind",
    # Receipt models
    "CameraScanResult",
    "ExtractedAmount",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
