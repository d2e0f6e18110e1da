"""Pydantic schemas for readings, current state and history."""

from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ReadingSourceName(str, Enum):
    normalized = "normalized"
    legacy = "legacy"


# ── Ingestion payload ───────────────────────────────


class SensorReadingIn(BaseModel):
    """Payload posted by the microcontroller.

    Accepts both the English keys and the Spanish keys older firmware sends.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    temperature: float = Field(validation_alias=AliasChoices("temperature", "temperatura"))
    humidity: float = Field(default=0.0, validation_alias=AliasChoices("humidity", "humedad"))
    pump1: bool = Field(validation_alias=AliasChoices("pump1", "pump", "bomba1", "bomba"))
    pump2: bool = Field(default=False, validation_alias=AliasChoices("pump2", "bomba2"))
    lights: bool = Field(default=False, validation_alias=AliasChoices("lights", "luces"))

    @property
    def event(self) -> str:
        """Legacy event label derived from the pump 1 state."""
        return "pump1_on" if self.pump1 else "pump1_off"


class IngestResponse(BaseModel):
    status: str = "ok"
    event: str = Field(description="pump1_on | pump1_off")


# ── Readings out ────────────────────────────────────


class ReadingItem(BaseModel):
    """A single reading as shown on the dashboard."""
    id: int | None = None
    temperature: float | None = None
    humidity: float | None = None
    pump1_on: bool | None = None
    pump2_on: bool | None = None
    lights_on: bool | None = None
    event: str | None = Field(default=None, description="pump1_on | pump1_off")
    timestamp: datetime | None = None
    source: ReadingSourceName


class StateResponse(BaseModel):
    """Response for GET /estado. ``state`` is null until the first reading arrives."""
    state: ReadingItem | None = None


class HistoryResponse(BaseModel):
    """Response for GET /historial (newest first)."""
    source: ReadingSourceName
    count: int
    readings: list[ReadingItem]
