"""SQLAlchemy models for the append-only configuration tables (schema reference only)."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from hydroponics.models.sensor_reading import Base


class PumpConfiguration(Base):
    __tablename__ = "configuracion_bombas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pump_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    on_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    off_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255))
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    fecha: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<PumpConfiguration pump={self.pump_number} {self.on_minutes}/{self.off_minutes}>"


class LightConfiguration(Base):
    __tablename__ = "configuracion_luces"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hour_on: Mapped[int] = mapped_column(Integer, nullable=False)
    hour_off: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    fecha: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<LightConfiguration {self.hour_on}h-{self.hour_off}h>"
