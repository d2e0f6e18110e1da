"""Append-only log of light switching events."""

import logging

from hydroponics.database import Database
from hydroponics.errors import ValidationError
from hydroponics.schemas.configuration import LightEventItem, LightMode

logger = logging.getLogger(__name__)


async def record_light_event(
    db: Database,
    on: bool,
    mode: str = LightMode.manual.value,
    description: str | None = None,
) -> None:
    """Append a manual or automatic light on/off event."""
    try:
        mode = LightMode(mode).value
    except ValueError:
        raise ValidationError("mode must be 'manual' or 'auto'", fields=["mode"]) from None
    if not isinstance(on, bool):
        raise ValidationError("on must be a boolean", fields=["on"])

    if not description:
        description = f"Luces {'encendidas' if on else 'apagadas'} ({mode})"

    await db.execute(
        "INSERT INTO eventos_luces (state, mode, description) VALUES ($1, $2, $3)",
        on,
        mode,
        description,
    )
    logger.info("Light event: %s (%s)", "on" if on else "off", mode)


async def fetch_light_events(db: Database, limit: int) -> list[LightEventItem]:
    """Newest ``limit`` light events, newest first."""
    rows = await db.fetch(
        """
        SELECT id, state, mode, description, fecha
        FROM eventos_luces
        ORDER BY fecha DESC, id DESC
        LIMIT $1
        """,
        limit,
    )
    return [
        LightEventItem(
            id=r["id"],
            on=bool(r["state"]),
            mode=r["mode"],
            description=r["description"],
            timestamp=r["fecha"],
        )
        for r in rows
    ]
