"""Ingestion: payload validation and the normalized/legacy dual write."""

import logging

from pydantic import ValidationError as PydanticValidationError

from hydroponics.database import Database
from hydroponics.errors import StoreError, ValidationError
from hydroponics.schemas.readings import SensorReadingIn

logger = logging.getLogger(__name__)


def validate_reading(payload: dict) -> SensorReadingIn:
    """Check a raw payload and return a normalized reading.

    Null values are treated as absent so optional fields fall back to their
    neutral default (0 / false) instead of propagating nulls.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Payload must be a JSON object", fields=[])

    cleaned = {k: v for k, v in payload.items() if v is not None}
    try:
        return SensorReadingIn.model_validate(cleaned)
    except PydanticValidationError as exc:
        missing, invalid = [], []
        for err in exc.errors():
            field = str(err["loc"][0]) if err["loc"] else "body"
            (missing if err["type"] == "missing" else invalid).append(field)
        parts = []
        if missing:
            parts.append(f"Missing fields: {', '.join(missing)}")
        if invalid:
            parts.append(f"Invalid fields: {', '.join(invalid)}")
        raise ValidationError("; ".join(parts), fields=missing + invalid) from None


async def ingest_reading(db: Database, reading: SensorReadingIn) -> str:
    """
    Persist a reading to the normalized table and mirror it to ``registros``.

    The normalized write is authoritative: if it fails the call fails and no
    legacy row is written. The legacy mirror is best-effort; its failure is
    logged and ignored. Returns the derived event label.
    """
    await db.execute(
        """
        INSERT INTO lecturas_sensores (temperature, humidity, pump1, pump2, lights)
        VALUES ($1, $2, $3, $4, $5)
        """,
        reading.temperature,
        reading.humidity,
        reading.pump1,
        reading.pump2,
        reading.lights,
    )

    try:
        await db.execute(
            """
            INSERT INTO registros (temperature, humidity, pump1, pump2, lights, event)
            VALUES ($1, $2, $3, $4, $5, $6)
            """,
            reading.temperature,
            reading.humidity,
            reading.pump1,
            reading.pump2,
            reading.lights,
            reading.event,
        )
    except StoreError as exc:
        logger.warning("Legacy mirror write failed, keeping normalized reading: %s", exc)

    logger.info(
        "Reading stored: %.1fC %.0f%% %s",
        reading.temperature,
        reading.humidity,
        reading.event,
    )
    return reading.event
