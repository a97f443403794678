"""
Ticket Enricher
Turns a RawTicket into a Ticket with resolved names, status text and SLA outcome
"""

import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from services.ingest.sla import SLAThresholdTable
from shared.schemas import (
    CLOSED_STATUSES,
    RawTicket,
    Ticket,
    priority_label,
    status_text,
)

logger = structlog.get_logger()

UNKNOWN_PERSON = "-"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC"""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except (ValueError, AttributeError):
            return None
    return as_utc(parsed)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def minutes_spent(hours_spent: Union[Decimal, float, None]) -> int:
    """floor(hours * 60), taken in decimal so 2.05 h is 123 minutes"""
    if not hours_spent:
        return 0
    return math.floor(Decimal(str(hours_spent)) * 60)


def resolve_closed_at(raw: RawTicket) -> Optional[datetime]:
    """
    Custom closed-at if it parses, else updated_at for closed statuses,
    else None
    """
    custom = raw.custom_fields
    closed_at = parse_timestamp(custom.closed_at) if custom else None
    if closed_at is not None:
        return closed_at
    if raw.status in CLOSED_STATUSES:
        return as_utc(raw.updated_at)
    return None


def is_violation(created_at: datetime, basis: datetime, threshold_seconds: float) -> int:
    """1 if the elapsed time is strictly longer than the threshold"""
    elapsed = (as_utc(basis) - as_utc(created_at)).total_seconds()
    return 1 if elapsed > threshold_seconds else 0


def enrich_ticket(
    raw: RawTicket,
    contacts: Mapping[int, str],
    agents: Mapping[int, str],
    sla: SLAThresholdTable,
    now: datetime,
) -> Ticket:
    """
    Derive the enriched Ticket for a raw record

    Pure function: no I/O, and ``now`` is the time used for tickets that are
    neither closed nor resolved.

    Args:
        raw: Decoded ticket from the API
        contacts: Requester id -> display name
        agents: Agent id -> display name
        sla: Resolution thresholds per priority label
        now: Evaluation time

    Returns:
        Enriched Ticket
    """
    priority = priority_label(raw.priority)
    created_at = as_utc(raw.created_at)
    closed_at = resolve_closed_at(raw)
    resolved_at = parse_timestamp(raw.custom_fields.resolved_at) if raw.custom_fields else None

    basis = closed_at or resolved_at or now
    violation = is_violation(created_at, basis, sla.threshold_for(priority))

    agent = agents.get(raw.responder_id, UNKNOWN_PERSON) if raw.responder_id is not None else UNKNOWN_PERSON
    requester = contacts.get(raw.requester_id, UNKNOWN_PERSON) if raw.requester_id is not None else UNKNOWN_PERSON

    return Ticket(
        id=raw.id,
        created_at=created_at,
        subject=raw.subject,
        priority=priority,
        minutes_spent=minutes_spent(raw.custom_fields.hours_spent if raw.custom_fields else None),
        agent=agent,
        status=raw.status,
        status_text=status_text(raw.status),
        closed_at=closed_at,
        violation=violation,
        requester=requester,
        description=raw.description,
    )


class TicketEnricher:
    """
    Decodes raw ticket dicts and enriches them against fixed lookups.

    Records that fail to decode are dropped and counted in ``self.dropped``.
    """

    def __init__(
        self,
        contacts: Mapping[int, str],
        agents: Mapping[int, str],
        sla: SLAThresholdTable,
    ):
        self.contacts = contacts
        self.agents = agents
        self.sla = sla
        self.dropped = 0

    def enrich(self, raw: RawTicket, now: datetime) -> Ticket:
        return enrich_ticket(raw, self.contacts, self.agents, self.sla, now)

    def enrich_records(self, records: Iterable[Union[RawTicket, dict]], now: datetime) -> list[Ticket]:
        """Enrich every record in arrival order; dicts are decoded first and dropped if invalid"""
        now = as_utc(now)
        tickets = []
        for record in records:
            if isinstance(record, RawTicket):
                tickets.append(self.enrich(record, now))
                continue
            try:
                raw = RawTicket.model_validate(record)
            except ValidationError as e:
                self.dropped += 1
                ticket_id = record.get("id") if isinstance(record, dict) else None
                logger.warning("Dropping undecodable ticket", ticket_id=ticket_id, error=str(e))
                continue
            tickets.append(self.enrich(raw, now))
        return tickets
