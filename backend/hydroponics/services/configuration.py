"""Configuration store for pump intervals and the light schedule.

Configuration tables are append-only logs: every change is a new row and the
current value is the latest active row. Resolution order for reads:

1. latest active row in the configuration table
2. latest config echo in the legacy ``registros`` table
3. built-in default
"""

import logging
from collections.abc import Callable, Iterable

from hydroponics.database import Database
from hydroponics.errors import StoreError, ValidationError
from hydroponics.schemas.configuration import ConfigSource, LightConfigItem, PumpConfigItem

logger = logging.getLogger(__name__)

PUMP_NUMBERS = (1, 2)
MAX_ON_MINUTES = 60
MAX_OFF_MINUTES = 1440

DEFAULT_PUMP_CONFIGS = {
    1: {"on_minutes": 5, "off_minutes": 30},
    2: {"on_minutes": 3, "off_minutes": 20},
}
DEFAULT_LIGHT_CONFIG = {"hour_on": 22, "hour_off": 2}

LIGHT_CONFIG_EVENT = "config_lights"


def pump_config_event(pump_number: int) -> str:
    return f"config_pump{pump_number}"


def latest(rows: Iterable[dict], predicate: Callable[[dict], bool] | None = None) -> dict | None:
    """Latest row (by ``fecha`` then ``id``) that satisfies ``predicate``."""
    candidates = [r for r in rows if predicate is None or predicate(r)]
    if not candidates:
        return None
    return max(candidates, key=lambda r: (r["fecha"], r["id"]))


def _is_active(row: dict) -> bool:
    return bool(row["active"])


# ── Validation ──────────────────────────────────────


def _require_int(name: str, value, low: int, high: int, *, low_inclusive: bool) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer", fields=[name])
    below = value < low if low_inclusive else value <= low
    if below or value > high:
        bracket = "[" if low_inclusive else "("
        raise ValidationError(f"{name} must be in {bracket}{low}, {high}]", fields=[name])


def validate_pump_number(pump_number) -> None:
    if isinstance(pump_number, bool) or pump_number not in PUMP_NUMBERS:
        raise ValidationError("pump_number must be 1 or 2", fields=["pump_number"])


def validate_pump_config(pump_number, on_minutes, off_minutes) -> None:
    validate_pump_number(pump_number)
    _require_int("on_minutes", on_minutes, 0, MAX_ON_MINUTES, low_inclusive=False)
    _require_int("off_minutes", off_minutes, 0, MAX_OFF_MINUTES, low_inclusive=False)


def validate_light_config(hour_on, hour_off) -> None:
    _require_int("hour_on", hour_on, 0, 23, low_inclusive=True)
    _require_int("hour_off", hour_off, 0, 23, low_inclusive=True)


# ── Pumps ───────────────────────────────────────────


async def set_pump_config(
    db: Database,
    pump_number: int,
    on_minutes: int,
    off_minutes: int,
    description: str | None = None,
) -> None:
    """Append a new active configuration for a pump (and echo it to registros)."""
    validate_pump_config(pump_number, on_minutes, off_minutes)
    if not description:
        description = f"Bomba {pump_number}: {on_minutes} min ON / {off_minutes} min OFF"

    await db.execute(
        """
        INSERT INTO configuracion_bombas (pump_number, on_minutes, off_minutes, description, active)
        VALUES ($1, $2, $3, $4, $5)
        """,
        pump_number,
        on_minutes,
        off_minutes,
        description,
        True,
    )
    await _mirror_to_legacy(db, pump_config_event(pump_number), on_minutes, off_minutes)
    logger.info("Pump %d configured: %d min on / %d min off", pump_number, on_minutes, off_minutes)


async def get_pump_config(db: Database, pump_number: int) -> PumpConfigItem:
    """Current configuration for a pump. Always returns a value."""
    validate_pump_number(pump_number)

    rows = await db.fetch(
        """
        SELECT id, pump_number, on_minutes, off_minutes, description, active, fecha
        FROM configuracion_bombas
        WHERE pump_number = $1
        """,
        pump_number,
    )
    row = latest(rows, _is_active)
    if row:
        return PumpConfigItem(
            pump_number=row["pump_number"],
            on_minutes=row["on_minutes"],
            off_minutes=row["off_minutes"],
            description=row["description"],
            active=True,
            created_at=row["fecha"],
            source=ConfigSource.config,
        )

    legacy = await _latest_legacy_echo(db, pump_config_event(pump_number))
    if legacy:
        return PumpConfigItem(
            pump_number=pump_number,
            on_minutes=legacy["intervalo_on"],
            off_minutes=legacy["intervalo_off"],
            created_at=legacy["fecha"],
            source=ConfigSource.legacy,
        )

    return PumpConfigItem(
        pump_number=pump_number,
        **DEFAULT_PUMP_CONFIGS[pump_number],
        source=ConfigSource.default,
    )


async def list_pump_configs(db: Database) -> list[PumpConfigItem]:
    return [await get_pump_config(db, n) for n in PUMP_NUMBERS]


# ── Lights ──────────────────────────────────────────


async def set_light_config(db: Database, hour_on: int, hour_off: int) -> None:
    """Append a new active light schedule (and echo it to registros)."""
    validate_light_config(hour_on, hour_off)

    await db.execute(
        "INSERT INTO configuracion_luces (hour_on, hour_off, active) VALUES ($1, $2, $3)",
        hour_on,
        hour_off,
        True,
    )
    await _mirror_to_legacy(db, LIGHT_CONFIG_EVENT, hour_on, hour_off)
    logger.info("Light schedule set: on at %02d:00, off at %02d:00", hour_on, hour_off)


async def get_light_config(db: Database) -> LightConfigItem:
    """Current light schedule. Always returns a value."""
    rows = await db.fetch(
        "SELECT id, hour_on, hour_off, active, fecha FROM configuracion_luces"
    )
    row = latest(rows, _is_active)
    if row:
        return LightConfigItem(
            hour_on=row["hour_on"],
            hour_off=row["hour_off"],
            created_at=row["fecha"],
            source=ConfigSource.config,
        )

    legacy = await _latest_legacy_echo(db, LIGHT_CONFIG_EVENT)
    if legacy:
        return LightConfigItem(
            hour_on=legacy["intervalo_on"],
            hour_off=legacy["intervalo_off"],
            created_at=legacy["fecha"],
            source=ConfigSource.legacy,
        )

    return LightConfigItem(**DEFAULT_LIGHT_CONFIG, source=ConfigSource.default)


# ── Legacy echo ─────────────────────────────────────


async def _latest_legacy_echo(db: Database, event: str) -> dict | None:
    return await db.fetchrow(
        """
        SELECT id, intervalo_on, intervalo_off, fecha
        FROM registros
        WHERE event = $1
          AND intervalo_on IS NOT NULL
          AND intervalo_off IS NOT NULL
        ORDER BY fecha DESC, id DESC
        LIMIT 1
        """,
        event,
    )


async def _mirror_to_legacy(db: Database, event: str, value_on: int, value_off: int) -> None:
    """Best-effort echo of a config change for clients still reading registros."""
    try:
        await db.execute(
            "INSERT INTO registros (event, intervalo_on, intervalo_off) VALUES ($1, $2, $3)",
            event,
            value_on,
            value_off,
        )
    except StoreError as exc:
        logger.warning("Legacy echo of %s failed, keeping configuration row: %s", event, exc)
