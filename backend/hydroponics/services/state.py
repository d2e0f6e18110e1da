"""State reconciliation between the normalized and the legacy reading tables.

The current state is the latest qualifying row of the first source that has
one. Sources are tried in order: ``lecturas_sensores`` then ``registros``.
Rows whose pump column is null never qualify.
"""

from typing import Protocol

from hydroponics.database import Database
from hydroponics.schemas.readings import ReadingItem, ReadingSourceName


def _event_label(pump1) -> str | None:
    if pump1 is None:
        return None
    return "pump1_on" if pump1 else "pump1_off"


def _as_bool(value) -> bool | None:
    return None if value is None else bool(value)


def _to_reading(row: dict, source: ReadingSourceName) -> ReadingItem:
    return ReadingItem(
        id=row["id"],
        temperature=row["temperature"],
        humidity=row["humidity"],
        pump1_on=_as_bool(row["pump1"]),
        pump2_on=_as_bool(row["pump2"]),
        lights_on=_as_bool(row["lights"]),
        event=row.get("event") or _event_label(row["pump1"]),
        timestamp=row["fecha"],
        source=source,
    )


class ReadingSource(Protocol):
    name: ReadingSourceName

    async def latest(self) -> ReadingItem | None: ...

    async def recent(self, limit: int) -> list[ReadingItem]: ...


class NormalizedReadingSource:
    """Readings from ``lecturas_sensores``."""

    name = ReadingSourceName.normalized

    def __init__(self, db: Database):
        self.db = db

    async def latest(self) -> ReadingItem | None:
        rows = await self.recent(1)
        return rows[0] if rows else None

    async def recent(self, limit: int) -> list[ReadingItem]:
        rows = await self.db.fetch(
            """
            SELECT id, temperature, humidity, pump1, pump2, lights, fecha
            FROM lecturas_sensores
            WHERE pump1 IS NOT NULL
            ORDER BY fecha DESC, id DESC
            LIMIT $1
            """,
            limit,
        )
        return [_to_reading(r, self.name) for r in rows]


class LegacyReadingSource:
    """Readings from ``registros``, skipping rows that only echo a config change."""

    name = ReadingSourceName.legacy

    def __init__(self, db: Database):
        self.db = db

    async def latest(self) -> ReadingItem | None:
        rows = await self.recent(1)
        return rows[0] if rows else None

    async def recent(self, limit: int) -> list[ReadingItem]:
        rows = await self.db.fetch(
            """
            SELECT id, temperature, humidity, pump1, pump2, lights, event, fecha
            FROM registros
            WHERE temperature IS NOT NULL
              AND humidity IS NOT NULL
              AND pump1 IS NOT NULL
            ORDER BY fecha DESC, id DESC
            LIMIT $1
            """,
            limit,
        )
        return [_to_reading(r, self.name) for r in rows]


class StateReconciler:
    """Resolve the current system state from an ordered list of sources."""

    def __init__(self, sources: list[ReadingSource]):
        self.sources = list(sources)

    async def current_state(self) -> ReadingItem | None:
        """Latest reading of the first non-empty source, or None when there is no data yet."""
        for source in self.sources:
            reading = await source.latest()
            if reading is not None:
                return reading
        return None


def default_reconciler(db: Database) -> StateReconciler:
    return StateReconciler([NormalizedReadingSource(db), LegacyReadingSource(db)])


async def fetch_history(
    db: Database,
    limit: int,
    source: ReadingSourceName = ReadingSourceName.normalized,
) -> list[ReadingItem]:
    """Return the newest ``limit`` readings of one table, newest first."""
    if source == ReadingSourceName.legacy:
        return await LegacyReadingSource(db).recent(limit)
    return await NormalizedReadingSource(db).recent(limit)
