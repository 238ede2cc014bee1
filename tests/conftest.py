"""
Pytest configuration and fixtures for Weather Station tests.
"""

import asyncio
import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Keep the module-level engine away from a real database
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / 'weather_station_test.db'}",
)
os.environ.pop("RETENTION_DAYS", None)

from sqlalchemy.pool import NullPool  # noqa: E402


@pytest.fixture
def session_maker(tmp_path):
    """Session factory bound to a fresh SQLite database with tables created."""
    from app.core.database import build_engine, build_session_maker, init_db

    # NullPool: every asyncio.run / TestClient loop gets its own connection
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    asyncio.run(init_db(engine))

    yield build_session_maker(engine)

    asyncio.run(engine.dispose())


@pytest.fixture
def client(session_maker):
    """API test client using the temporary database."""
    from fastapi.testclient import TestClient

    from app.api.main import app
    from app.core.database import get_db

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed_reading(session_maker):
    """Store a reading with a chosen server timestamp."""
    from app.services.readings import store_reading

    def _seed(at: datetime, **overrides):
        values = {
            "temperature": 21.5,
            "humidity": 40.0,
            "pressure": 1013.2,
            "gas_resistance": 120.0,
        }
        values.update(overrides)

        async def _store():
            async with session_maker() as session:
                return await store_reading(session, values, now=at)

        return asyncio.run(_store())

    return _seed


@pytest.fixture
def sample_reading_payload():
    """Sample body the station POSTs."""
    return {
        "temperature": 22.5,
        "humidity": 45.0,
        "pressure": 1012.8,
        "gasResistance": 152.3,
    }
