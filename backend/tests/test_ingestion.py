import pytest

from hydroponics.errors import StoreError, ValidationError
from hydroponics.services.ingestion import ingest_reading, validate_reading

from .utils import run, sensor_payload


def test_validate_reading_fills_neutral_defaults() -> None:
    reading = validate_reading({"temperature": 21.0, "pump": False})

    assert reading.temperature == 21.0
    assert reading.humidity == 0.0
    assert reading.pump1 is False
    assert reading.pump2 is False
    assert reading.lights is False
    assert reading.event == "pump1_off"


def test_validate_reading_accepts_spanish_keys() -> None:
    reading = validate_reading({"temperatura": 19.5, "humedad": 71, "bomba": 1, "luces": True})

    assert reading.temperature == 19.5
    assert reading.humidity == 71
    assert reading.pump1 is True
    assert reading.lights is True
    assert reading.event == "pump1_on"


def test_validate_reading_treats_null_as_absent() -> None:
    reading = validate_reading(sensor_payload(humidity=None, pump2=None))

    assert reading.humidity == 0.0
    assert reading.pump2 is False


def test_validate_reading_reports_missing_fields() -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_reading({"humidity": 50})

    assert "temperature" in exc_info.value.fields
    assert "pump1" in exc_info.value.fields
    assert "Missing fields" in exc_info.value.message


def test_validate_reading_reports_malformed_field() -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_reading(sensor_payload(temperature="hot"))

    assert exc_info.value.fields == ["temperature"]


def test_validate_reading_rejects_non_object() -> None:
    with pytest.raises(ValidationError):
        validate_reading(["temperature", 20])  # type: ignore[arg-type]


def test_ingest_writes_normalized_and_legacy(db, pool) -> None:
    event = run(ingest_reading(db, validate_reading(sensor_payload())))

    assert event == "pump1_on"
    assert pool.count("lecturas_sensores") == 1
    legacy = pool.conn.execute("SELECT temperature, humidity, pump1, event FROM registros").fetchone()
    assert tuple(legacy) == (24.5, 60.0, 1, "pump1_on")


def test_ingest_ignores_legacy_failure(db, pool) -> None:
    pool.fail_on = "INSERT INTO registros"

    event = run(ingest_reading(db, validate_reading(sensor_payload(pump=False))))

    assert event == "pump1_off"
    assert pool.count("lecturas_sensores") == 1
    assert pool.count("registros") == 0


def test_ingest_fails_when_normalized_write_fails(db, pool) -> None:
    pool.fail_on = "INSERT INTO lecturas_sensores"

    with pytest.raises(StoreError):
        run(ingest_reading(db, validate_reading(sensor_payload())))

    # No legacy-only partial success
    assert pool.count("registros") == 0
