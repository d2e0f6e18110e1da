"""SQLAlchemy models for the reading tables (schema reference only)."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class SensorReading(Base):
    """Normalized readings: sensor/actuator snapshot only."""

    __tablename__ = "lecturas_sensores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    humidity: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    pump1: Mapped[bool] = mapped_column(Boolean, nullable=False)
    pump2: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    lights: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    fecha: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )

    def __repr__(self) -> str:
        return f"<SensorReading {self.temperature}C pump1={self.pump1} @ {self.fecha}>"


class LegacyRecord(Base):
    """Legacy wide table: readings and config echoes share it."""

    __tablename__ = "registros"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    temperature: Mapped[float | None] = mapped_column(Float)
    humidity: Mapped[float | None] = mapped_column(Float)
    pump1: Mapped[bool | None] = mapped_column(Boolean)
    pump2: Mapped[bool | None] = mapped_column(Boolean)
    lights: Mapped[bool | None] = mapped_column(Boolean)
    event: Mapped[str | None] = mapped_column(String(50))
    intervalo_on: Mapped[int | None] = mapped_column(Integer)
    intervalo_off: Mapped[int | None] = mapped_column(Integer)
    fecha: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )

    def __repr__(self) -> str:
        return f"<LegacyRecord event={self.event} @ {self.fecha}>"
