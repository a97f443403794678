"""
Tests for the ticket/directory schemas and the code -> label mappings.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from shared.schemas import (
    NO_NAME,
    Agent,
    Contact,
    RawTicket,
    SLAPolicy,
    priority_label,
    status_text,
)

from conftest import raw_ticket


class TestPriorityLabel:
    @pytest.mark.parametrize(
        "code,label",
        [(1, "Low"), (2, "Medium"), (3, "High"), (4, "Urgent")],
    )
    def test_known_codes(self, code: int, label: str) -> None:
        assert priority_label(code) == label

    @pytest.mark.parametrize("code", [0, 5, 9, -1, 100])
    def test_other_codes_are_unknown(self, code: int) -> None:
        assert priority_label(code) == "Unknown"


class TestStatusText:
    @pytest.mark.parametrize(
        "code,text",
        [
            (2, "Open"),
            (3, "Pending"),
            (4, "Closed"),
            (5, "Closed"),
            (6, "Resolved"),
            (7, "Waiting on Customer"),
            (8, "Waiting on Third Party"),
        ],
    )
    def test_known_codes(self, code: int, text: str) -> None:
        assert status_text(code) == text

    def test_other_code_includes_number(self) -> None:
        assert status_text(12) == "Other(12)"
        assert status_text(1) == "Other(1)"


class TestRawTicket:
    def test_decodes_iso_dates(self) -> None:
        raw = RawTicket.model_validate(raw_ticket(created_at="2025-02-01T10:00:00Z"))
        assert raw.created_at == datetime(2025, 2, 1, 10, tzinfo=timezone.utc)

    def test_custom_fields_optional(self) -> None:
        record = raw_ticket()
        del record["custom_fields"]
        assert RawTicket.model_validate(record).custom_fields is None

    def test_ignores_unknown_fields(self) -> None:
        raw = RawTicket.model_validate(raw_ticket(stats={"first_responded_at": None}, tags=["vpn"]))
        assert raw.id == 1

    def test_is_immutable(self) -> None:
        raw = RawTicket.model_validate(raw_ticket())
        with pytest.raises(ValidationError):
            raw.status = 5

    def test_missing_created_at_fails(self) -> None:
        record = raw_ticket()
        del record["created_at"]
        with pytest.raises(ValidationError):
            RawTicket.model_validate(record)


class TestContactDisplayName:
    def test_prefers_email(self) -> None:
        assert Contact(id=1, email="a@example.com", name="Ann").display_name() == "a@example.com"

    def test_falls_back_to_name(self) -> None:
        assert Contact(id=1, name="Ann").display_name() == "Ann"

    def test_dash_when_nothing(self) -> None:
        assert Contact(id=1).display_name() == "-"


class TestAgentDisplayName:
    def test_contact_full_name_first(self) -> None:
        agent = Agent.model_validate({
            "id": 7,
            "full_name": "Top Level",
            "contact": {"full_name": "Dana Whitfield", "first_name": "Dana"},
        })
        assert agent.display_name() == "Dana Whitfield"

    def test_skips_empty_strings(self) -> None:
        agent = Agent.model_validate({
            "id": 7,
            "full_name": "",
            "contact": {"full_name": "", "first_name": "Dana"},
        })
        assert agent.display_name() == "Dana"

    def test_chain_order(self) -> None:
        assert Agent(id=1, full_name="Full").display_name() == "Full"
        assert Agent(id=1, first_name="First", email="e@x.io").display_name() == "First"
        assert Agent.model_validate(
            {"id": 1, "email": "top@x.io", "contact": {"email": "inner@x.io"}}
        ).display_name() == "top@x.io"
        assert Agent.model_validate({"id": 1, "contact": {"email": "inner@x.io"}}).display_name() == "inner@x.io"

    def test_no_name(self) -> None:
        assert Agent(id=1).display_name() == NO_NAME == "(No Name)"


class TestSLAPolicy:
    def test_parses_targets(self) -> None:
        policy = SLAPolicy.model_validate({
            "id": 3,
            "name": "Default SLA Policy",
            "sla_target": {"priority_4": {"respond_within": 900, "resolve_within": 3600}},
        })
        assert policy.sla_target["priority_4"].resolve_within == 3600
