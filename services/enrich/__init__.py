"""
FSS Enrich Service
Converts raw Freshdesk tickets into enriched Ticket entities

Components:
- enricher.py: enrich_ticket (pure derivation) and TicketEnricher (decode + enrich)
"""

from .enricher import TicketEnricher, enrich_ticket, parse_timestamp

__all__ = ["TicketEnricher", "enrich_ticket", "parse_timestamp"]
