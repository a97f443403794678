"""
FSS Sync Service
Keeps an enriched copy of Freshdesk tickets and serves it over HTTP
"""

import asyncio
from contextlib import asynccontextmanager, suppress
from datetime import date, datetime
from typing import Optional

import structlog
from fastapi import BackgroundTasks, FastAPI, HTTPException, Query, Request
from pydantic import BaseModel

from services.report.weekly import (
    ALL_AGENTS,
    WeekRange,
    agent_names,
    current_week,
    filter_by_agent,
    filter_by_week,
    generate_weeks,
    summarize_week,
    ticket_url,
)
from shared.config import LOG_LEVEL, load_credentials
from shared.logging_config import configure_logging
from shared.schemas import Conversation, Ticket

from .orchestrator import SyncService

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the sync service, load caches and start the first sync"""
    configure_logging(LOG_LEVEL)
    if getattr(app.state, "sync_service", None) is None:
        app.state.sync_service = SyncService.from_credentials(load_credentials())
    service: SyncService = app.state.sync_service

    logger.info("Starting FSS Sync Service", domain=service.client.base_url)
    await service.startup()
    startup_task = None
    if getattr(app.state, "sync_on_startup", True):
        startup_task = asyncio.create_task(run_sync_job(service))
    yield
    if startup_task is not None:
        startup_task.cancel()
        with suppress(asyncio.CancelledError):
            await startup_task
    await service.close()
    logger.info("Shutting down FSS Sync Service")


app = FastAPI(
    title="FSS Sync Service",
    description="Freshdesk SLA Sync - enriched tickets and weekly SLA totals",
    version="0.1.0",
    lifespan=lifespan,
)


class SyncResponse(BaseModel):
    """Response from a sync request"""
    status: str
    message: str


class SyncStatus(BaseModel):
    """State of the most recent sync"""
    busy: bool
    started_at: Optional[datetime] = None
    tickets: int = 0
    dropped: int = 0
    partial: bool = False
    errors: list[str] = []


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    freshdesk_reachable: bool
    contacts_cached: int
    agents_cached: int
    sla_thresholds: dict[str, int]


class RebuildResponse(BaseModel):
    cache: str
    merged: int
    entries: int
    error: Optional[str] = None


def get_service(request: Request) -> SyncService:
    return request.app.state.sync_service


def cached_tickets(service: SyncService) -> list[Ticket]:
    return service.last_result.tickets if service.last_result else []


def resolve_week(week: Optional[date]) -> WeekRange:
    if week is not None:
        return WeekRange.containing(week)
    today = date.today()
    return current_week(generate_weeks(today.year), today) or WeekRange.containing(today)


async def run_sync_job(service: SyncService):
    """Background task running one full sync"""
    result = await service.sync_all()
    if result.partial:
        logger.warning("Sync finished with partial results", errors=result.errors)


@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Check Freshdesk reachability and cache sizes"""
    service = get_service(request)
    reachable = await service.client.check_health()

    return HealthResponse(
        status="healthy" if reachable else "degraded",
        freshdesk_reachable=reachable,
        contacts_cached=len(service.contacts),
        agents_cached=len(service.agents),
        sla_thresholds=service.sla.thresholds,
    )


@app.post("/sync", response_model=SyncResponse, status_code=202)
async def start_sync(request: Request, background_tasks: BackgroundTasks):
    """Start a full sync unless one is already running"""
    service = get_service(request)
    if service.busy:
        raise HTTPException(status_code=409, detail="Sync already in progress")

    logger.info("Starting sync job")
    background_tasks.add_task(run_sync_job, service)
    return SyncResponse(status="started", message=f"Syncing tickets updated since {service.updated_since}")


@app.get("/sync/status", response_model=SyncStatus)
async def sync_status(request: Request):
    service = get_service(request)
    result = service.last_result
    if result is None:
        return SyncStatus(busy=service.busy)
    return SyncStatus(
        busy=service.busy,
        started_at=result.started_at,
        tickets=len(result.tickets),
        dropped=result.dropped,
        partial=result.partial,
        errors=result.errors,
    )


@app.get("/tickets")
async def list_tickets(
    request: Request,
    week: Optional[date] = Query(None, description="Any day in the week to show"),
    agent: str = Query(ALL_AGENTS),
    violations_only: bool = False,
):
    """Enriched tickets from the last sync, filtered by week and agent"""
    service = get_service(request)
    tickets = cached_tickets(service)
    if week is not None:
        tickets = filter_by_week(tickets, WeekRange.containing(week))
    tickets = filter_by_agent(tickets, agent)
    if violations_only:
        tickets = [t for t in tickets if t.violation]

    return {
        "count": len(tickets),
        "agents": agent_names(cached_tickets(service)),
        "tickets": [
            {**t.model_dump(mode="json"), "url": ticket_url(service.client.base_url, t.id)}
            for t in tickets
        ],
    }


@app.get("/summary")
async def weekly_summary(
    request: Request,
    week: Optional[date] = Query(None, description="Any day in the week to summarize"),
    agent: str = Query(ALL_AGENTS),
):
    """Weekly dashboard totals"""
    service = get_service(request)
    summary = summarize_week(cached_tickets(service), resolve_week(week), agent)
    return summary.to_dict()


@app.get("/tickets/{ticket_id}/conversations", response_model=list[Conversation])
async def ticket_conversations(request: Request, ticket_id: int):
    return await get_service(request).client.fetch_conversations(ticket_id)


@app.post("/caches/{name}/rebuild", response_model=RebuildResponse)
async def rebuild_cache(request: Request, name: str):
    """Rebuild the contact or agent cache from Freshdesk"""
    service = get_service(request)
    if name not in service.caches:
        raise HTTPException(status_code=404, detail=f"Unknown cache: {name}")
    if service.busy:
        raise HTTPException(status_code=409, detail="Sync already in progress")

    merged = await service.rebuild_cache(name)
    cache = service.caches[name]
    return RebuildResponse(cache=name, merged=merged, entries=len(cache), error=cache.last_error)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
