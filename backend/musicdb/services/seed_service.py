"""
Music DB API - Seed Loader
============================

What:  Replaces the contents of the tracks table with the bundled dataset.
Why:   The catalog is fixed; a fresh environment needs it loaded once.
How:   Reads data/top-music.json, deletes every existing track, and inserts
       one row per dataset entry, all inside a single transaction.
Who:   Called from the application lifespan when RESET_DB is set.
When:  Once at startup, after the database connection is established and
       before the server accepts traffic.

Atomicity:
    DELETE + bulk INSERT share one transaction (session.begin()). If anything
    fails midway the rollback leaves the previous catalog untouched, so a
    crash never leaves a half-seeded table behind.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from sqlalchemy import delete, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from musicdb.database import async_session_factory
from musicdb.exceptions import DatabaseError
from musicdb.models.track import INTEGER_FIELDS, PUBLIC_FIELDS, STRING_FIELDS, Track
from musicdb.object_id import new_object_id
from musicdb.services.track_service import coerce_value

logger = logging.getLogger(__name__)

DATASET_PATH = Path(__file__).resolve().parent.parent / "data" / "top-music.json"


def load_dataset(path: Path = DATASET_PATH) -> List[Dict[str, Any]]:
    """
    Read the bundled dataset.

    Raises:
        OSError: the file is missing or unreadable
        ValueError: the file is not a JSON array of objects
    """
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError(f"{path.name} must contain a JSON array of objects")
    return data


def _dataset_value(field: str, value: Any) -> Any:
    if value is None:
        return None
    if field in STRING_FIELDS:
        return str(value)
    if isinstance(value, str):
        return coerce_value(field, value)
    if field in INTEGER_FIELDS and isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def track_row(entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map one dataset entry (camelCase keys) to ORM attribute values.

    Unknown keys are dropped, missing keys become null, and every row gets a
    freshly minted object_id; an `_id` in the entry is ignored.
    """
    row: Dict[str, Any] = {"object_id": new_object_id()}
    for field, attribute in PUBLIC_FIELDS.items():
        if field == "_id":
            continue
        row[attribute] = _dataset_value(field, entry.get(field))
    return row


async def seed_tracks(session: AsyncSession, dataset: Sequence[Dict[str, Any]]) -> int:
    """
    Clear the tracks table and insert one row per dataset entry.

    Args:
        session: A session with no transaction in progress
        dataset: Entries as loaded by load_dataset()

    Returns:
        Number of rows inserted.

    Raises:
        ValidationError: an entry holds a value that cannot be coerced
        DatabaseError: the transaction failed and was rolled back
    """
    rows = [track_row(entry) for entry in dataset]

    try:
        async with session.begin():
            removed = await session.execute(delete(Track))
            if rows:
                await session.execute(insert(Track), rows)
    except SQLAlchemyError as e:
        logger.error("Seeding failed, previous tracks kept: %s", str(e), exc_info=True)
        raise DatabaseError(
            message="Could not seed the tracks table.",
            context={"error_type": type(e).__name__, "rows": len(rows)},
        )

    logger.info("Seed complete: removed %s, inserted %d tracks", removed.rowcount, len(rows))
    return len(rows)


async def reset_database(path: Path = DATASET_PATH) -> int:
    """Load the bundled dataset and seed it with a dedicated session."""
    dataset = load_dataset(path)
    logger.info("RESET_DB set: reseeding tracks from %s (%d entries)", path.name, len(dataset))
    async with async_session_factory() as session:
        return await seed_tracks(session, dataset)
