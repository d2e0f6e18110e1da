"""API routes for sensor ingestion, current state and history."""

from fastapi import APIRouter, Body, Depends, Query, Request

from hydroponics.config import Settings
from hydroponics.database import Database, get_db
from hydroponics.errors import ValidationError
from hydroponics.schemas.readings import (
    HistoryResponse,
    IngestResponse,
    ReadingSourceName,
    StateResponse,
)
from hydroponics.services.ingestion import ingest_reading, validate_reading
from hydroponics.services.state import default_reconciler, fetch_history

router = APIRouter(tags=["Readings"])


# ── POST /datos ─────────────────────────────────────


@router.post(
    "/datos",
    response_model=IngestResponse,
    summary="Ingest a reading from the microcontroller",
)
async def post_reading(payload: dict = Body(...), db: Database = Depends(get_db)):
    """
    Validate the payload (temperature and pump 1 are required) and store it
    in the normalized table, mirrored to the legacy table.
    """
    reading = validate_reading(payload)
    event = await ingest_reading(db, reading)
    return IngestResponse(event=event)


# ── GET /estado ─────────────────────────────────────


@router.get(
    "/estado",
    response_model=StateResponse,
    summary="Current system state",
)
async def get_state(db: Database = Depends(get_db)):
    """Latest reading, falling back to the legacy table; ``state`` is null when no data exists yet."""
    state = await default_reconciler(db).current_state()
    return StateResponse(state=state)


# ── GET /historial ──────────────────────────────────


@router.get(
    "/historial",
    response_model=HistoryResponse,
    summary="Recent readings for the dashboard",
)
async def get_history(
    request: Request,
    limit: int | None = Query(
        default=None,
        ge=1,
        description="Number of readings, newest first (defaults to HISTORY_PAGE_SIZE)",
    ),
    source: ReadingSourceName = Query(
        default=ReadingSourceName.normalized,
        description="Table to read from",
    ),
    db: Database = Depends(get_db),
):
    settings: Settings = request.app.state.settings
    if limit is None:
        limit = settings.HISTORY_PAGE_SIZE
    elif limit > settings.HISTORY_MAX_PAGE_SIZE:
        raise ValidationError(
            f"limit must be at most {settings.HISTORY_MAX_PAGE_SIZE}",
            fields=["limit"],
        )
    readings = await fetch_history(db, limit, source)
    return HistoryResponse(source=source, count=len(readings), readings=readings)
