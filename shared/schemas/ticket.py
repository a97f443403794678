"""
Freshdesk SLA Sync - Ticket Schemas

Defines the wire-level RawTicket and the enriched Ticket entity
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TicketPriority(str, Enum):
    """Freshdesk ticket priority label"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"
    UNKNOWN = "Unknown"


PRIORITY_LABELS = {
    1: TicketPriority.LOW,
    2: TicketPriority.MEDIUM,
    3: TicketPriority.HIGH,
    4: TicketPriority.URGENT,
}

STATUS_TEXT = {
    2: "Open",
    3: "Pending",
    4: "Closed",
    5: "Closed",
    6: "Resolved",
    7: "Waiting on Customer",
    8: "Waiting on Third Party",
}

# Freshdesk codes that mean the ticket is closed
CLOSED_STATUSES = frozenset({4, 5})


def priority_label(code: int) -> str:
    """Map a Freshdesk priority code to its label"""
    return PRIORITY_LABELS.get(code, TicketPriority.UNKNOWN).value


def status_text(code: int) -> str:
    """Map a Freshdesk status code to display text"""
    return STATUS_TEXT.get(code, f"Other({code})")


class CustomFields(BaseModel):
    """Custom ticket fields maintained by the helpdesk admins"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    hours_spent: Optional[Decimal] = None
    resolved_at: Optional[str] = None
    closed_at: Optional[str] = None

    @field_validator("hours_spent", mode="before")
    @classmethod
    def hours_from_float(cls, value):
        # 2.05 must stay 2.05, not the nearest binary float
        if isinstance(value, float):
            return str(value)
        return value


class RawTicket(BaseModel):
    """
    Ticket record as returned by /api/v2/tickets.
    Immutable once decoded.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    subject: str
    priority: int
    created_at: datetime
    updated_at: datetime
    responder_id: Optional[int] = None
    due_by: Optional[str] = None
    status: int
    requester_id: Optional[int] = None
    description: Optional[str] = None
    custom_fields: Optional[CustomFields] = None


class Ticket(BaseModel):
    """
    Enriched ticket with resolved names and SLA outcome.
    Derived from a RawTicket; never mutated after creation.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 4211,
                "created_at": "2025-01-01T00:00:00Z",
                "subject": "VPN drops every hour",
                "priority": "High",
                "minutes_spent": 90,
                "agent": "Dana Whitfield",
                "status": 6,
                "status_text": "Resolved",
                "closed_at": None,
                "violation": 0,
                "requester": "sam@example.com",
                "description": "Since Monday the VPN client disconnects...",
            }
        },
    )

    id: int
    created_at: datetime
    subject: str
    priority: str
    minutes_spent: int = 0
    agent: str = "-"
    status: int
    status_text: str
    closed_at: Optional[datetime] = None
    violation: int = Field(0, ge=0, le=1)
    requester: str = "-"
    description: Optional[str] = None


class Conversation(BaseModel):
    """Single reply or note on a ticket"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    body_text: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[str] = None
