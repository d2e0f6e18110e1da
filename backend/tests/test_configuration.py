import pytest

from hydroponics.errors import ValidationError
from hydroponics.schemas.configuration import ConfigSource
from hydroponics.services.configuration import (
    get_light_config,
    get_pump_config,
    latest,
    list_pump_configs,
    set_light_config,
    set_pump_config,
)

from .utils import run


@pytest.mark.parametrize(
    "args, field",
    [
        ((1, 0, 10), "on_minutes"),
        ((3, 5, 30), "pump_number"),
        ((1, 61, 10), "on_minutes"),
        ((2, 5, 0), "off_minutes"),
        ((2, 5, 1441), "off_minutes"),
        ((1, 5.5, 30), "on_minutes"),
    ],
)
def test_set_pump_config_rejects_out_of_range(db, pool, args, field) -> None:
    with pytest.raises(ValidationError) as exc_info:
        run(set_pump_config(db, *args))

    assert exc_info.value.fields == [field]
    # Validation happens before any store call
    assert pool.statements == []


def test_pump_defaults_without_config(db) -> None:
    pump2 = run(get_pump_config(db, 2))
    assert (pump2.pump_number, pump2.on_minutes, pump2.off_minutes) == (2, 3, 20)
    assert pump2.source == ConfigSource.default

    pump1 = run(get_pump_config(db, 1))
    assert (pump1.on_minutes, pump1.off_minutes) == (5, 30)


def test_set_pump_config_latest_wins(db, pool) -> None:
    run(set_pump_config(db, 1, 10, 60))
    run(set_pump_config(db, 1, 15, 45, "verano"))
    run(set_pump_config(db, 2, 4, 25))

    pump1 = run(get_pump_config(db, 1))

    assert (pump1.on_minutes, pump1.off_minutes) == (15, 45)
    assert pump1.description == "verano"
    assert pump1.source == ConfigSource.config
    # Append-only: history is kept
    assert pool.count("configuracion_bombas") == 3


def test_set_pump_config_echoes_to_legacy(db, pool) -> None:
    run(set_pump_config(db, 2, 4, 25))

    row = pool.conn.execute(
        "SELECT event, intervalo_on, intervalo_off, temperature FROM registros"
    ).fetchone()
    assert tuple(row) == ("config_pump2", 4, 25, None)


def test_pump_config_falls_back_to_legacy_echo(db, pool) -> None:
    pool.conn.execute(
        "INSERT INTO registros (event, intervalo_on, intervalo_off) VALUES ('config_pump1', 7, 33)"
    )

    pump1 = run(get_pump_config(db, 1))

    assert (pump1.on_minutes, pump1.off_minutes) == (7, 33)
    assert pump1.source == ConfigSource.legacy


def test_inactive_pump_rows_are_ignored(db, pool) -> None:
    pool.conn.execute(
        "INSERT INTO configuracion_bombas (pump_number, on_minutes, off_minutes, active) VALUES (1, 9, 90, 0)"
    )

    assert run(get_pump_config(db, 1)).source == ConfigSource.default


def test_legacy_echo_failure_does_not_fail_config_write(db, pool) -> None:
    pool.fail_on = "INSERT INTO registros"

    run(set_pump_config(db, 1, 8, 40))

    pool.fail_on = None
    assert run(get_pump_config(db, 1)).on_minutes == 8


def test_list_pump_configs_covers_both_pumps(db) -> None:
    run(set_pump_config(db, 2, 4, 25))

    pumps = run(list_pump_configs(db))

    assert [p.pump_number for p in pumps] == [1, 2]
    assert [p.source for p in pumps] == [ConfigSource.default, ConfigSource.config]


def test_light_config_default_and_validation(db) -> None:
    light = run(get_light_config(db))
    assert (light.hour_on, light.hour_off) == (22, 2)
    assert light.source == ConfigSource.default

    with pytest.raises(ValidationError) as exc_info:
        run(set_light_config(db, 8, 30))
    assert exc_info.value.fields == ["hour_off"]

    with pytest.raises(ValidationError):
        run(set_light_config(db, -1, 5))


def test_set_light_config_latest_wins(db) -> None:
    run(set_light_config(db, 6, 18))
    run(set_light_config(db, 0, 23))

    light = run(get_light_config(db))

    assert (light.hour_on, light.hour_off) == (0, 23)
    assert light.source == ConfigSource.config


def test_light_config_falls_back_to_legacy_echo(db, pool) -> None:
    pool.conn.execute(
        "INSERT INTO registros (event, intervalo_on, intervalo_off) VALUES ('config_lights', 20, 4)"
    )

    light = run(get_light_config(db))

    assert (light.hour_on, light.hour_off, light.source) == (20, 4, ConfigSource.legacy)


def test_latest_orders_by_fecha_then_id() -> None:
    rows = [
        {"id": 1, "fecha": "2026-01-02 00:00:00", "active": True},
        {"id": 3, "fecha": "2026-01-01 00:00:00", "active": True},
        {"id": 2, "fecha": "2026-01-02 00:00:00", "active": True},
        {"id": 4, "fecha": "2026-01-03 00:00:00", "active": False},
    ]

    assert latest(rows)["id"] == 4
    assert latest(rows, lambda r: r["active"])["id"] == 2
    assert latest([], lambda r: True) is None
