"""
Weekly ticket reporting
Mon-Fri week ranges, ticket filters and dashboard totals
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

from shared.schemas import Ticket

ALL_AGENTS = "All Agents"

# A week's end date covers the whole Friday
END_OF_DAY = timedelta(seconds=86399)


@dataclass(frozen=True)
class WeekRange:
    """Working week from Monday 00:00 to the end of Friday, UTC"""
    start: datetime
    end: datetime

    @classmethod
    def for_monday(cls, monday: date) -> "WeekRange":
        start = datetime.combine(monday, time.min, tzinfo=timezone.utc)
        return cls(start=start, end=start + timedelta(days=4))

    @classmethod
    def containing(cls, day: date) -> "WeekRange":
        return cls.for_monday(day - timedelta(days=day.weekday()))

    @property
    def last_moment(self) -> datetime:
        return self.end + END_OF_DAY

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return self.start <= moment <= self.last_moment

    def __str__(self) -> str:
        return f"{self.start:%b %d} - {self.end:%b %d, %Y}"


def generate_weeks(year: int) -> list[WeekRange]:
    """Every Mon-Fri week whose Monday falls in the given year"""
    day = date(year, 1, 1)
    day += timedelta(days=(7 - day.weekday()) % 7)
    weeks = []
    while day.year == year:
        weeks.append(WeekRange.for_monday(day))
        day += timedelta(days=7)
    return weeks


def current_week(weeks: list[WeekRange], today: Optional[date] = None) -> Optional[WeekRange]:
    """
    The week containing today; on a weekend, the week just finished.
    Falls back to the last week in the list.
    """
    if not weeks:
        return None
    today = today or datetime.now(timezone.utc).date()
    moment = datetime.combine(today, time.min, tzinfo=timezone.utc)
    for week in weeks:
        if week.start <= moment <= week.start + timedelta(days=6, seconds=86399):
            return week
    return weeks[-1]


def filter_by_week(tickets: Iterable[Ticket], week: WeekRange) -> list[Ticket]:
    """Tickets created within the week"""
    return [t for t in tickets if week.contains(t.created_at)]


def filter_by_agent(tickets: Iterable[Ticket], agent: str = ALL_AGENTS) -> list[Ticket]:
    if agent == ALL_AGENTS:
        return list(tickets)
    return [t for t in tickets if t.agent == agent]


def agent_names(tickets: Iterable[Ticket]) -> list[str]:
    """Agent filter choices, "All Agents" first"""
    return [ALL_AGENTS] + sorted({t.agent for t in tickets})


def ticket_url(domain: str, ticket_id: int) -> str:
    """Agent-portal link for a ticket"""
    return f"{domain.rstrip('/')}/a/tickets/{ticket_id}"


@dataclass
class WeeklySummary:
    """Dashboard totals for one week"""
    week: str
    agent: str
    total_minutes: int
    tickets_created: int
    tickets_closed: int
    closed_in_week: int
    sla_violations_week: int
    sla_violations_ytd: int

    def to_dict(self) -> dict:
        return asdict(self)


def summarize_week(
    all_tickets: list[Ticket],
    week: WeekRange,
    agent: str = ALL_AGENTS,
) -> WeeklySummary:
    """
    Totals for the tickets created in a week

    Year-to-date violations count every ticket passed in, regardless of the
    week or agent filter.
    """
    in_week = filter_by_week(all_tickets, week)
    shown = filter_by_agent(in_week, agent)

    return WeeklySummary(
        week=str(week),
        agent=agent,
        total_minutes=sum(t.minutes_spent for t in shown),
        tickets_created=len(shown),
        tickets_closed=sum(1 for t in shown if t.status_text == "Closed"),
        closed_in_week=sum(1 for t in shown if week.contains(t.closed_at)),
        sla_violations_week=sum(t.violation for t in in_week),
        sla_violations_ytd=sum(t.violation for t in all_tickets),
    )
