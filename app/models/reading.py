"""
Reading model - one sample from the weather station
"""

from datetime import datetime
from sqlalchemy import Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.timeframes import utcnow


class Reading(Base):
    """Sensor reading. Never updated once stored."""

    __tablename__ = "readings"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Sensor data
    temperature: Mapped[float] = mapped_column(Float)  # Celsius
    humidity: Mapped[float] = mapped_column(Float)  # %
    pressure: Mapped[float] = mapped_column(Float)  # hPa
    gas_resistance: Mapped[float] = mapped_column(Float)  # kOhm

    # Timestamps (assigned by the server, never by the device)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow
    )

    def __repr__(self) -> str:
        return f"<Reading {self.id} t={self.temperature}C h={self.humidity}%>"
