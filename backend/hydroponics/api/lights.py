"""API routes for the light event log."""

from fastapi import APIRouter, Depends, Query, Request

from hydroponics.config import Settings
from hydroponics.database import Database, get_db
from hydroponics.errors import ValidationError
from hydroponics.schemas.configuration import LightEventIn, LightEventsResponse
from hydroponics.services.lights import fetch_light_events, record_light_event

router = APIRouter(prefix="/luces", tags=["Lights"])


@router.get("/eventos", response_model=LightEventsResponse, summary="Recent light events")
async def list_light_events(
    request: Request,
    limit: int | None = Query(default=None, ge=1),
    db: Database = Depends(get_db),
):
    # Never page past what retention keeps
    settings: Settings = request.app.state.settings
    if limit is None:
        limit = min(settings.HISTORY_PAGE_SIZE, settings.RETENTION_LIGHT_EVENTS)
    elif limit > settings.RETENTION_LIGHT_EVENTS:
        raise ValidationError(
            f"limit must be at most {settings.RETENTION_LIGHT_EVENTS}",
            fields=["limit"],
        )
    events = await fetch_light_events(db, limit)
    return LightEventsResponse(count=len(events), events=events)


@router.post("/eventos", status_code=201, summary="Record a light on/off event")
async def post_light_event(body: LightEventIn, db: Database = Depends(get_db)):
    await record_light_event(db, body.on, body.mode, body.description)
    return {"status": "ok"}
