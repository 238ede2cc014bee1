"""
Weather Station - API Server

Provides endpoints for:
- Reading ingestion from the station (POST /api/sensor-data)
- Windowed queries for the dashboard (GET /api/sensor-data)
- Server-side PNG charts
- Health check
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import async_session_maker, get_db, init_db
from app.core.exceptions import ValidationError, WeatherStationError
from app.schemas.reading import IngestResponse, QueryResponse, ReadingOut
from app.services.charts import generate_metric_chart, resolve_metric
from app.services.readings import query_window, store_reading
from app.services.scheduler import RetentionScheduler
from app.utils.validation import INVALID_READING_MESSAGE, parse_limit, validate_reading_payload

API_VERSION = "1.0.0"

# Setup logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


# ==================== LIFESPAN ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and start the retention purge if configured."""
    await init_db()

    scheduler = None
    task = None
    if settings.retention_enabled:
        scheduler = RetentionScheduler(
            async_session_maker,
            retention_days=settings.retention_days,
            interval=settings.retention_interval,
        )
        task = asyncio.create_task(scheduler.start())
    else:
        logger.info("Retention disabled: readings are kept indefinitely")

    logger.info(f"🚀 Weather Station API v{API_VERSION} started")

    yield

    if scheduler:
        scheduler.stop()
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)


# ==================== APP ====================

app = FastAPI(
    title="Weather Station API",
    description="Stores environmental sensor readings and serves time-windowed queries",
    version=API_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(WeatherStationError)
async def weather_station_error_handler(request: Request, exc: WeatherStationError):
    """Render domain errors as {"error": message}."""
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


# ==================== SENSOR DATA ====================

@app.post("/api/sensor-data", status_code=201)
async def ingest_reading(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Store one reading from the station.

    Body: {temperature, humidity, pressure, gasResistance} - all numbers.
    The timestamp is assigned by the server.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError(INVALID_READING_MESSAGE) from None

    values = validate_reading_payload(body)
    reading = await store_reading(db, values)

    return JSONResponse(
        IngestResponse(id=reading.id).model_dump(),
        status_code=201,
    )


@app.get("/api/sensor-data")
async def get_readings(
    time_frame: str | None = Query(None, alias="timeFrame"),
    limit: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Readings within a trailing window, newest first.

    timeFrame: 1h | 6h | 24h | 7d | 30d (anything else -> 24h)
    limit: positive integer (invalid -> default 1000)
    """
    result = await query_window(
        db,
        time_frame or settings.default_time_frame,
        parse_limit(limit, settings.default_limit),
    )

    response = QueryResponse(
        data=[ReadingOut.model_validate(r) for r in result.readings],
        count=result.count,
        time_frame=result.time_frame.value,
        cutoff_time=result.cutoff,
    )
    return response.model_dump(by_alias=True, mode="json")


@app.get("/api/sensor-data/chart.png")
async def get_chart(
    time_frame: str | None = Query(None, alias="timeFrame"),
    metric: str | None = Query(None),
    limit: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """PNG chart of one metric over a window."""
    result = await query_window(
        db,
        time_frame or settings.default_time_frame,
        parse_limit(limit, settings.default_limit),
    )
    buf = generate_metric_chart(result.readings, resolve_metric(metric), result.time_frame.value)

    return StreamingResponse(buf, media_type="image/png")


# ==================== HEALTH CHECK ====================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": API_VERSION,
    }


@app.get("/")
async def root():
    """Root endpoint with available endpoints."""
    return {
        "service": "Weather Station API",
        "version": API_VERSION,
        "retention_days": settings.retention_days,
        "endpoints": {
            "ingest": "POST /api/sensor-data",
            "query": "GET /api/sensor-data?timeFrame=24h&limit=1000",
            "chart": "GET /api/sensor-data/chart.png?timeFrame=24h&metric=temperature",
            "health": "/health",
        }
    }


# ==================== MAIN ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.api_port)
