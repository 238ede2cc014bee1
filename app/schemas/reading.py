"""
Reading schemas - what the API returns
JSON keys are camelCase (gasResistance, createdAt)
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.core.timeframes import ensure_utc


class ReadingOut(BaseModel):
    """Stored reading as served to the dashboard."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    temperature: float
    humidity: float
    pressure: float
    gas_resistance: float = Field(
        validation_alias=AliasChoices("gasResistance", "gas_resistance"),
        serialization_alias="gasResistance",
    )
    timestamp: datetime
    created_at: datetime = Field(
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )

    @field_validator("timestamp", "created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class IngestResponse(BaseModel):
    success: bool = True
    message: str = "Sensor data stored successfully"
    id: int


class QueryResponse(BaseModel):
    """Body of GET /api/sensor-data."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: list[ReadingOut]
    count: int
    time_frame: str = Field(alias="timeFrame")
    cutoff_time: datetime = Field(alias="cutoffTime")
