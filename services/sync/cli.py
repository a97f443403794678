#!/usr/bin/env python3
"""
FSS CLI
Command-line tool for syncing Freshdesk tickets and reporting SLA totals
"""

import asyncio
import json
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import click

from services.report.weekly import (
    ALL_AGENTS,
    WeekRange,
    current_week,
    generate_weeks,
    summarize_week,
)
from shared.config import DATA_DIR, LOG_LEVEL, UPDATED_SINCE, load_credentials
from shared.errors import NotConfigured
from shared.logging_config import configure_logging

from .orchestrator import SyncService


def build_service(ctx: click.Context) -> SyncService:
    opts = ctx.obj
    try:
        credentials = load_credentials(opts["api_key"], opts["domain"])
    except NotConfigured as e:
        raise click.ClickException(f"{e}. Set FRESHDESK_API_KEY and FRESHDESK_DOMAIN.")
    return SyncService.from_credentials(
        credentials,
        data_dir=opts["data_dir"],
        updated_since=opts["updated_since"],
    )


@click.group()
@click.option("--api-key", envvar="FRESHDESK_API_KEY", default=None, help="Freshdesk API key")
@click.option("--domain", envvar="FRESHDESK_DOMAIN", default=None, help="Freshdesk base URL")
@click.option("--data-dir", type=click.Path(path_type=Path), default=DATA_DIR, show_default=True,
              help="Directory for the contact/agent caches")
@click.option("--updated-since", default=UPDATED_SINCE, show_default=True, help="Ticket cutoff (ISO-8601)")
@click.option("--log-level", default=LOG_LEVEL, show_default=True)
@click.pass_context
def main(ctx: click.Context, api_key: Optional[str], domain: Optional[str], data_dir: Path,
         updated_since: str, log_level: str):
    """Freshdesk SLA Sync."""
    configure_logging(log_level)
    ctx.obj = {
        "api_key": api_key,
        "domain": domain,
        "data_dir": data_dir,
        "updated_since": updated_since,
    }


@main.command()
@click.pass_context
def test(ctx: click.Context):
    """Test the connection to Freshdesk."""
    service = build_service(ctx)

    async def run() -> bool:
        try:
            return await service.client.check_health()
        finally:
            await service.close()

    if asyncio.run(run()):
        click.echo(f"✅ Freshdesk is reachable at {service.client.base_url}")
    else:
        click.echo("❌ Failed to reach Freshdesk")
        sys.exit(1)


@main.command()
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None, help="Write tickets to a JSON file")
@click.pass_context
def sync(ctx: click.Context, output: Optional[Path]):
    """Fetch and enrich every ticket since the cutoff."""
    service = build_service(ctx)

    async def run():
        try:
            await service.startup()
            return await service.sync_all()
        finally:
            await service.close()

    result = asyncio.run(run())
    click.echo(f"✅ Synced {len(result.tickets)} tickets ({result.dropped} dropped)")
    if result.partial:
        click.echo(f"⚠️  Partial results: {'; '.join(result.errors)}")

    if output:
        with open(output, "w") as f:
            json.dump([t.model_dump(mode="json") for t in result.tickets], f, indent=2)
        click.echo(f"   Saved to {output}")


@main.command()
@click.argument("name", type=click.Choice(["contacts", "agents"]))
@click.pass_context
def rebuild(ctx: click.Context, name: str):
    """Rebuild the contact or agent cache from Freshdesk."""
    service = build_service(ctx)

    async def run() -> int:
        try:
            return await service.rebuild_cache(name)
        finally:
            await service.close()

    merged = asyncio.run(run())
    cache = service.caches[name]
    click.echo(f"✅ Merged {merged} {name}; cache now holds {len(cache)} entries")
    if cache.last_error:
        click.echo(f"⚠️  Rebuild stopped early: {cache.last_error}")


@main.command()
@click.pass_context
def sla(ctx: click.Context):
    """Show the SLA resolution thresholds."""
    service = build_service(ctx)

    async def run() -> bool:
        try:
            return await service.sla.populate(service.client)
        finally:
            await service.close()

    if not asyncio.run(run()):
        click.echo("⚠️  No SLA policy loaded; every priority uses the 7 day fallback")
    for label in ("Low", "Medium", "High", "Urgent", "Unknown"):
        click.echo(f"   {label:<8} {service.sla.threshold_for(label):>8}s")


@main.command()
@click.option("--week", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Any day in the week to report (default: current week)")
@click.option("--agent", default=ALL_AGENTS, show_default=True)
@click.pass_context
def report(ctx: click.Context, week, agent: str):
    """Sync, then print weekly dashboard totals."""
    service = build_service(ctx)

    async def run():
        try:
            await service.startup()
            return await service.sync_all()
        finally:
            await service.close()

    result = asyncio.run(run())
    if week is not None:
        week_range = WeekRange.containing(week.date())
    else:
        today = date.today()
        week_range = current_week(generate_weeks(today.year), today) or WeekRange.containing(today)

    summary = summarize_week(result.tickets, week_range, agent)
    click.echo(f"Week {summary.week} ({summary.agent})")
    click.echo(f"   Total Time Spent:       {summary.total_minutes} minutes")
    click.echo(f"   Week Tickets Created:   {summary.tickets_created}")
    click.echo(f"   Week Tickets Closed:    {summary.tickets_closed}")
    click.echo(f"   Closed During Week:     {summary.closed_in_week}")
    click.echo(f"   SLA Violated (Week):    {summary.sla_violations_week}")
    click.echo(f"   SLA Violated (YTD):     {summary.sla_violations_ytd}")
    if result.partial:
        click.echo("⚠️  Totals are based on partial results")


@main.command()
@click.argument("ticket_id", type=int)
@click.pass_context
def conversations(ctx: click.Context, ticket_id: int):
    """Print the conversation thread of a ticket."""
    service = build_service(ctx)

    async def run():
        try:
            return await service.client.fetch_conversations(ticket_id)
        finally:
            await service.close()

    thread = asyncio.run(run())
    if not thread:
        click.echo("(No correspondence found)")
    for convo in thread:
        body = (convo.body_text or "").strip()
        if body:
            click.echo(body)
        if convo.created_at:
            click.echo(f"   {convo.created_at}")
        click.echo("-" * 40)


if __name__ == "__main__":
    main()
