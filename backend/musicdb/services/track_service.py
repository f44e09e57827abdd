"""
Music DB API - Track Service (Read Queries)
=============================================

What:  Every read the API performs against the tracks table.
Why:   Keeps filter building, value coercion and not-found handling out of
       the route handlers, so they can be tested with a plain session.
How:   Each public method issues exactly one SELECT and returns Pydantic
       response models. Missing rows and bad input become application
       exceptions that the global handlers render.
Who:   Called by routes/songs.py.

Filter semantics (GET /songs):
    ?trackName=X&genre=Y     exact match on every pair (AND)
    ?genre=pop&genre=rock    a repeated key matches any of its values
    ?bpm=100                 tracks with bpm > 100; all other pairs ignored
    ?bpm=                    empty numeric value matches tracks without a bpm
    ?unknown=1               no stored track carries the field → []

Ordering:
    Multi-row results are ordered by object_id, which is creation order for
    ids minted by the seed loader. "First match" for title lookups means the
    first in that order.
"""

import logging
import math
from collections import OrderedDict
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import false, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from musicdb.exceptions import (
    DatabaseError,
    NotFoundError,
    QueryError,
    ValidationError,
)
from musicdb.models.track import INTEGER_FIELDS, PUBLIC_FIELDS, STRING_FIELDS, Track
from musicdb.object_id import normalize_object_id
from musicdb.schemas.track import TrackResponse

logger = logging.getLogger(__name__)

THRESHOLD_FIELD = "bpm"

# Range of the INTEGER column type on every supported backend
INTEGER_MIN = -(2 ** 31)
INTEGER_MAX = 2 ** 31 - 1


def coerce_value(field: str, raw: str) -> Any:
    """
    Convert a query-string value to the type stored in `field`.

    Returns None for an empty numeric value (matches rows where the field is
    null). Raises ValidationError when the value cannot be converted.
    """
    if field in STRING_FIELDS:
        return raw

    if field == "_id":
        try:
            return normalize_object_id(raw)
        except ValueError:
            raise ValidationError(message="Invalid id", field=field, context={"value": raw})

    if raw.strip() == "":
        return None

    try:
        number = float(raw)
    except ValueError:
        raise ValidationError(
            message=f"Invalid value for '{field}': expected a number",
            field=field,
            context={"value": raw},
        )

    if field in INTEGER_FIELDS and math.isfinite(number) and number.is_integer():
        return int(number)
    return number


def parse_threshold(raw: str) -> float:
    """Parse the bpm threshold; unlike exact filters an empty value is never passed here."""
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(
            message=f"Invalid value for '{THRESHOLD_FIELD}': expected a number",
            field=THRESHOLD_FIELD,
            context={"value": raw},
        )


def _group_params(params: Iterable[Tuple[str, str]]) -> "OrderedDict[str, List[str]]":
    grouped: "OrderedDict[str, List[str]]" = OrderedDict()
    for key, value in params:
        grouped.setdefault(key, []).append(value)
    return grouped


def _fits_integer_column(value: Any) -> bool:
    return isinstance(value, int) and INTEGER_MIN <= value <= INTEGER_MAX


def _match_condition(field: str, column, value: Any):
    """
    Equality condition for one filter value.

    An integer field compared with a fraction or a number outside the column
    range can match no row; such values are never sent to the driver.
    """
    if value is None:
        return column.is_(None)
    if field in INTEGER_FIELDS and not _fits_integer_column(value):
        return false()
    return column == value


class TrackService:
    """
    Stateless query layer for tracks.

    Error Handling Strategy:
        - Bad client input → ValidationError (400)
        - Absent single track → NotFoundError (404)
        - Driver failure in id/title lookup → QueryError (400)
        - Driver failure in list queries → DatabaseError (500)
    """

    async def list_tracks(
        self,
        db: AsyncSession,
        params: Sequence[Tuple[str, str]] = (),
    ) -> List[TrackResponse]:
        """
        Filter tracks by the raw query-string pairs.

        When a non-empty `bpm` value is present the exact-match filters are
        discarded entirely and the result is every track with bpm strictly
        above it. Existing clients rely on that override.

        Args:
            db: Async database session
            params: Query-string (key, value) pairs in request order

        Returns:
            Matching tracks (possibly empty), never raises NotFoundError.
        """
        grouped = _group_params(params)

        threshold_values = grouped.get(THRESHOLD_FIELD)
        if threshold_values and threshold_values[-1] != "":
            threshold = parse_threshold(threshold_values[-1])
            query = select(Track).where(Track.bpm > threshold)
            return await self._fetch_all(db, query, "bpm threshold")

        conditions = []
        unknown = []
        for key, values in grouped.items():
            attribute = PUBLIC_FIELDS.get(key)
            if attribute is None:
                unknown.append(key)
                continue
            column = getattr(Track, attribute)
            matches = []
            for value in (coerce_value(key, raw) for raw in values):
                matches.append(_match_condition(key, column, value))
            conditions.append(or_(*matches) if len(matches) > 1 else matches[0])

        if unknown:
            # No stored track has these fields, so nothing can match.
            logger.debug("Filter on unknown field(s) %s matches nothing", unknown)
            conditions.append(false())

        query = select(Track)
        if conditions:
            query = query.where(*conditions)
        return await self._fetch_all(db, query, "exact match")

    async def get_track_by_id(self, db: AsyncSession, object_id: str) -> TrackResponse:
        """
        Fetch one track by its internal id.

        Raises:
            ValidationError: `object_id` is not a well-formed id (→ 400)
            NotFoundError: no track has that id (→ 404)
            QueryError: the lookup failed (→ 400)
        """
        try:
            key = normalize_object_id(object_id)
        except ValueError:
            raise ValidationError(message="Invalid id", field="id", context={"value": object_id})

        try:
            track = await db.get(Track, key)
        except SQLAlchemyError as e:
            logger.error("Lookup of track %s failed: %s", object_id, str(e))
            raise QueryError(message="Invalid id", context={"error_type": type(e).__name__})

        if track is None:
            raise NotFoundError(message="Id does not exist", resource_id=object_id)
        return TrackResponse.model_validate(track)

    async def get_track_by_title(self, db: AsyncSession, track_name: str) -> TrackResponse:
        """
        Fetch the first track whose name equals `track_name` (case-sensitive).

        Raises:
            NotFoundError: no track has that name (→ 404)
            QueryError: the lookup failed (→ 400)
        """
        query = (
            select(Track)
            .where(Track.track_name == track_name)
            .order_by(Track.object_id)
            .limit(1)
        )
        try:
            result = await db.execute(query)
            track: Optional[Track] = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Title lookup for %r failed: %s", track_name, str(e))
            raise QueryError(message="Invalid title", context={"error_type": type(e).__name__})

        if track is None:
            raise NotFoundError(message="Title not found", resource_id=track_name)
        return TrackResponse.model_validate(track)

    async def list_tracks_by_artist(self, db: AsyncSession, artist_name: str) -> List[TrackResponse]:
        """All tracks by `artist_name`; an unknown artist yields an empty list."""
        query = select(Track).where(Track.artist_name == artist_name)
        return await self._fetch_all(db, query, "artist")

    async def list_tracks_by_genre(self, db: AsyncSession, genre: str) -> List[TrackResponse]:
        """All tracks in `genre`; an unknown genre yields an empty list."""
        query = select(Track).where(Track.genre == genre)
        return await self._fetch_all(db, query, "genre")

    async def count_tracks(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(Track))
        return result.scalar() or 0

    async def _fetch_all(self, db: AsyncSession, query, label: str) -> List[TrackResponse]:
        try:
            result = await db.execute(query.order_by(Track.object_id))
            tracks = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Track query (%s) failed: %s", label, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve tracks. Please try again.",
                context={"query": label, "error_type": type(e).__name__},
            )
        return [TrackResponse.model_validate(track) for track in tracks]


# Singleton: TrackService is stateless
track_service = TrackService()
