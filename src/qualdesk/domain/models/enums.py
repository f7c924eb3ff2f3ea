"""Enumerations for domain models."""

from enum import Enum


class StatusFilter(str, Enum):
    """Registration status a qualification can be filtered by."""

    OFFICIAL = "official"  # unregistered flag is False
    UNREGISTERED = "unregistered"  # unregistered flag is True


class SortField(str, Enum):
    """Fields the qualification list can be sorted by."""

    TAXPAYER_ID = "taxpayer_id"
    INSTRUMENT_TYPE = "instrument_type"
    MARKET = "market"
    PERIOD = "period"
    QUALIFICATION_TYPE = "qualification_type"
    AMOUNT = "amount"
    UNREGISTERED = "unregistered"
    LAST_MODIFIED = "last_modified_at"


class SortDirection(str, Enum):
    """Sort directions."""

    ASC = "asc"
    DESC = "desc"


class AuditAction(str, Enum):
    """Actions recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    EXPORT = "EXPORT"


class AuditResource(str, Enum):
    """Resources an audit entry can refer to."""

    QUALIFICATION = "qualification"
    REPORT = "report"


class MutationPhase(str, Enum):
    """Lifecycle of a delete request."""

    IDLE = "IDLE"
    CONFIRMING = "CONFIRMING"
    EXECUTING = "EXECUTING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
