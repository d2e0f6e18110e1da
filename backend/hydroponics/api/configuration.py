"""API routes for pump and light configuration."""

from fastapi import APIRouter, Depends

from hydroponics.database import Database, get_db
from hydroponics.schemas.configuration import (
    LightConfigIn,
    LightConfigItem,
    PumpConfigIn,
    PumpConfigItem,
    PumpConfigsResponse,
)
from hydroponics.services.configuration import (
    get_light_config,
    get_pump_config,
    list_pump_configs,
    set_light_config,
    set_pump_config,
)

router = APIRouter(prefix="/config", tags=["Configuration"])


# ── Pumps ───────────────────────────────────────────


@router.get("/bombas", response_model=PumpConfigsResponse, summary="Current config of both pumps")
async def list_pumps(db: Database = Depends(get_db)):
    return PumpConfigsResponse(pumps=await list_pump_configs(db))


@router.get(
    "/bombas/{pump_number}",
    response_model=PumpConfigItem,
    summary="Current config of one pump",
)
async def get_pump(pump_number: int, db: Database = Depends(get_db)):
    """Latest active config, else the legacy echo, else the built-in default."""
    return await get_pump_config(db, pump_number)


@router.post("/bombas", response_model=PumpConfigItem, summary="Set a pump's on/off intervals")
async def post_pump(body: PumpConfigIn, db: Database = Depends(get_db)):
    await set_pump_config(db, body.pump_number, body.on_minutes, body.off_minutes, body.description)
    return await get_pump_config(db, body.pump_number)


# ── Lights ──────────────────────────────────────────


@router.get("/luces", response_model=LightConfigItem, summary="Current UV light schedule")
async def get_lights(db: Database = Depends(get_db)):
    return await get_light_config(db)


@router.post("/luces", response_model=LightConfigItem, summary="Set the UV light schedule")
async def post_lights(body: LightConfigIn, db: Database = Depends(get_db)):
    await set_light_config(db, body.hour_on, body.hour_off)
    return await get_light_config(db)
