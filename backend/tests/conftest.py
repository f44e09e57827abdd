"""
Music DB API - Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Points the app at a throwaway SQLite file BEFORE any musicdb import,
       rebuilds the schema for every test, and talks to the app through
       httpx's ASGITransport (no server, no lifespan).

Fixture Hierarchy:
    ├── database: fresh tables, connection state marked ready
    ├── db_session: AsyncSession on the test database
    ├── sample_tracks / seeded: a small catalog loaded through the seed loader
    └── client: HTTPX AsyncClient for endpoint testing
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
_TEST_DIR = tempfile.mkdtemp(prefix="musicdb_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/musicdb.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DB_CONNECT_ATTEMPTS"] = "1"
os.environ["DB_CONNECT_WAIT"] = "0"
os.environ.pop("MONGO_URL", None)
os.environ.pop("RESET_DB", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from musicdb.database import Base, async_session_factory, connection_state, engine
from musicdb.services.seed_service import seed_tracks


@pytest_asyncio.fixture
async def database():
    """Empty tracks table; the availability gate is open."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    connection_state.mark_ready()
    yield engine
    connection_state.mark_ready()


@pytest_asyncio.fixture
async def db_session(database):
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def sample_tracks():
    """
    A small catalog in dataset format (camelCase keys).

    Insertion order matters: the two "Song A" entries check that title
    lookups return the first stored match.
    """
    return [
        {
            "id": 1, "trackName": "Song A", "artistName": "X", "genre": "Pop",
            "bpm": 120, "energy": 55, "danceability": 76, "loudness": -6,
            "liveness": 8, "valence": 75, "length": 191, "acousticness": 4,
            "speechiness": 3, "popularity": 79,
        },
        {
            "id": 2, "trackName": "Song B", "artistName": "X", "genre": "Rock",
            "bpm": 95, "energy": 81, "danceability": 60, "loudness": -4,
            "liveness": 12, "valence": 40, "length": 240, "acousticness": 10,
            "speechiness": 5, "popularity": 88,
        },
        {
            "id": 3, "trackName": "Song C", "artistName": "Y", "genre": "Pop",
            "bpm": 100, "energy": 62, "danceability": 70, "loudness": -5,
            "liveness": 9, "valence": 50, "length": 200, "acousticness": 20,
            "speechiness": 4, "popularity": 70,
        },
        {
            "id": 4, "trackName": "Song A", "artistName": "Z", "genre": "Latin",
            "bpm": 176, "energy": 70, "danceability": 75, "loudness": -5,
            "liveness": 11, "valence": 62, "length": 226, "acousticness": 14,
            "speechiness": 34, "popularity": 91,
        },
        {
            "id": 5, "trackName": "Quiet One", "artistName": "Y", "genre": "Ambient",
            "bpm": None, "energy": 10, "danceability": 20, "loudness": -20,
            "liveness": 5, "valence": 30, "length": 300, "acousticness": 90,
            "speechiness": 2, "popularity": 40,
        },
    ]


@pytest_asyncio.fixture
async def seeded(database, sample_tracks):
    """The sample catalog, loaded the same way RESET_DB loads the real one."""
    async with async_session_factory() as session:
        await seed_tracks(session, sample_tracks)
    return sample_tracks


@pytest_asyncio.fixture
async def client(database):
    """
    HTTPX AsyncClient configured to talk to the FastAPI app.

    Usage:
        async def test_root(client):
            response = await client.get("/")
            assert response.status_code == 200
    """
    from musicdb.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
