"""Pydantic schemas for pump / light configuration, light events and maintenance."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ConfigSource(str, Enum):
    config = "config"    # normalized configuration table
    legacy = "legacy"    # event echo in registros
    default = "default"  # built-in fallback


class LightMode(str, Enum):
    manual = "manual"
    auto = "auto"


# ── Pumps ───────────────────────────────────────────


class PumpConfigIn(BaseModel):
    pump_number: int
    on_minutes: int
    off_minutes: int
    description: str | None = None


class PumpConfigItem(BaseModel):
    """Current configuration of one pump."""
    pump_number: int
    on_minutes: int = Field(description="Minutes ON per cycle (1-60)")
    off_minutes: int = Field(description="Minutes OFF per cycle (1-1440)")
    description: str | None = None
    active: bool = True
    created_at: datetime | None = None
    source: ConfigSource


class PumpConfigsResponse(BaseModel):
    """Response for GET /config/bombas."""
    pumps: list[PumpConfigItem]


# ── Lights ──────────────────────────────────────────


class LightConfigIn(BaseModel):
    hour_on: int
    hour_off: int


class LightConfigItem(BaseModel):
    """Current UV light schedule."""
    hour_on: int = Field(description="Hour of day the lights turn on (0-23)")
    hour_off: int = Field(description="Hour of day the lights turn off (0-23)")
    active: bool = True
    created_at: datetime | None = None
    source: ConfigSource


class LightEventIn(BaseModel):
    on: bool
    mode: str = LightMode.manual.value
    description: str | None = None


class LightEventItem(BaseModel):
    id: int
    on: bool
    mode: LightMode
    description: str | None = None
    timestamp: datetime


class LightEventsResponse(BaseModel):
    """Response for GET /luces/eventos (newest first)."""
    count: int
    events: list[LightEventItem]


# ── Maintenance ─────────────────────────────────────


class PruneResponse(BaseModel):
    """Response for POST /mantenimiento/limpieza."""
    deleted: dict[str, int] = Field(description="Rows removed per category")
    total_deleted: int
