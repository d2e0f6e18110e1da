"""Retention: keep only the newest K rows per category.

``prune()`` is the single implementation; the on-demand endpoint and the
background timer both go through :class:`Pruner`, which serializes runs and
lets timer ticks skip while a run is in flight.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from hydroponics.config import Settings
from hydroponics.database import Database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionRule:
    """Keep the newest ``keep`` rows of ``table`` (per ``partition_by`` value, if set)."""

    category: str
    table: str
    keep: int
    partition_by: str | None = None

    def delete_statement(self) -> str:
        # Rank by fecha, newest first; the larger id wins ties so the result is deterministic
        partition = f"PARTITION BY {self.partition_by} " if self.partition_by else ""
        return f"""
            DELETE FROM {self.table}
            WHERE id IN (
                SELECT id FROM (
                    SELECT id, ROW_NUMBER() OVER ({partition}ORDER BY fecha DESC, id DESC) AS rn
                    FROM {self.table}
                ) ranked
                WHERE rn > $1
            )
        """


# Legacy rows are ranked per kind: qualifying readings, then one window per
# config echo event, so neither kind can push the other out of retention.
LEGACY_ROW_KIND = (
    "CASE WHEN temperature IS NOT NULL AND humidity IS NOT NULL AND pump1 IS NOT NULL "
    "THEN 'reading' ELSE COALESCE(event, 'other') END"
)


def retention_rules(settings: Settings) -> list[RetentionRule]:
    return [
        RetentionRule("readings", "lecturas_sensores", settings.RETENTION_READINGS),
        RetentionRule(
            "legacy_readings",
            "registros",
            settings.RETENTION_LEGACY_READINGS,
            partition_by=LEGACY_ROW_KIND,
        ),
        RetentionRule("light_events", "eventos_luces", settings.RETENTION_LIGHT_EVENTS),
        RetentionRule(
            "pump_configs",
            "configuracion_bombas",
            settings.RETENTION_PUMP_CONFIGS,
            partition_by="pump_number",
        ),
        RetentionRule("light_configs", "configuracion_luces", settings.RETENTION_LIGHT_CONFIGS),
    ]


async def prune(db: Database, rules: list[RetentionRule]) -> dict[str, int]:
    """Delete rows outside each rule's window. Returns rows removed per category."""
    results: dict[str, int] = {}
    for rule in rules:
        if rule.keep < 1:
            raise ValueError(f"Retention for {rule.category} must keep at least one row")
        results[rule.category] = await db.execute(rule.delete_statement(), rule.keep)
    return results


class Pruner:
    """Runs ``prune()`` one at a time."""

    def __init__(self, rules: list[RetentionRule]):
        self.rules = list(rules)
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def run(self, db: Database) -> dict[str, int]:
        """Prune now, waiting for any run already in flight."""
        async with self._lock:
            started = time.monotonic()
            results = await prune(db, self.rules)
            logger.info(
                "Prune removed %d rows in %.2fs: %s",
                sum(results.values()),
                time.monotonic() - started,
                results,
            )
            return results

    async def run_if_idle(self, db: Database) -> dict[str, int] | None:
        """Prune unless a run is already in flight; returns None when skipped."""
        if self.running:
            logger.warning("Prune already in progress, skipping this tick")
            return None
        return await self.run(db)


async def prune_periodically(
    pruner: Pruner,
    db: Database,
    interval: float,
    run_immediately: bool = True,
) -> None:
    """Infinite loop that prunes every ``interval`` seconds.

    Failures are logged and the loop keeps going; only cancellation stops it.
    """
    if not run_immediately:
        await asyncio.sleep(interval)

    while True:
        try:
            await pruner.run_if_idle(db)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scheduled prune failed")

        await asyncio.sleep(interval)
