"""FSS Shared Schemas"""

from .directory import NO_NAME, Agent, AgentContact, Contact
from .sla import SLAPolicy, SLATarget
from .ticket import (
    CLOSED_STATUSES,
    Conversation,
    CustomFields,
    RawTicket,
    Ticket,
    TicketPriority,
    priority_label,
    status_text,
)

__all__ = [
    # Ticket schemas
    "CLOSED_STATUSES",
    "Conversation",
    "CustomFields",
    "RawTicket",
    "Ticket",
    "TicketPriority",
    "priority_label",
    "status_text",
    # Directory schemas
    "NO_NAME",
    "Agent",
    "AgentContact",
    "Contact",
    # SLA schemas
    "SLAPolicy",
    "SLATarget",
]
