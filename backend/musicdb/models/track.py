"""
Music DB API - Track SQLAlchemy Model
=======================================

What:  ORM model representing the `tracks` table.
Why:   Maps catalog rows to Python objects for the query service and seed loader.
Who:   Used by TrackService, the seed loader, and Alembic.

Table Design:
    - object_id: 24-hex primary key, exposed as `_id` (see object_id.py)
    - source_id: the numeric id carried by the bundled dataset, exposed as `id`
    - identifying strings: track_name, artist_name, genre
    - audio features: plain nullable floats; nothing is range-checked

    No uniqueness constraints beyond the primary key: the dataset may contain
    duplicate titles and the lookups return the first one in id order.
"""

from typing import Dict, Optional

from sqlalchemy import Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from musicdb.database import Base
from musicdb.object_id import new_object_id


class Track(Base):
    """A single music-catalog record. Immutable once seeded."""

    __tablename__ = "tracks"

    object_id: Mapped[str] = mapped_column(
        String(24),
        primary_key=True,
        default=new_object_id,
        comment="Internal identifier, returned to clients as _id",
    )

    source_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    track_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    artist_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    genre: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── Audio Features ────────────────────────────────────────────────────
    bpm: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    energy: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    danceability: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    loudness: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    liveness: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    valence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    length: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    acousticness: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    speechiness: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    popularity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Lookup-by-title/artist/genre and the bpm threshold are the hot paths
    __table_args__ = (
        Index("idx_tracks_track_name", "track_name"),
        Index("idx_tracks_artist_name", "artist_name"),
        Index("idx_tracks_genre", "genre"),
        Index("idx_tracks_bpm", "bpm"),
    )

    def __repr__(self) -> str:
        return f"<Track(object_id={self.object_id}, track_name='{self.track_name}')>"


# ── API Field Mapping ─────────────────────────────────────────────────────
# Public (camelCase) field name → ORM attribute name. Query-string filters and
# dataset entries both use the public names.
PUBLIC_FIELDS: Dict[str, str] = {
    "_id": "object_id",
    "id": "source_id",
    "trackName": "track_name",
    "artistName": "artist_name",
    "genre": "genre",
    "bpm": "bpm",
    "energy": "energy",
    "danceability": "danceability",
    "loudness": "loudness",
    "liveness": "liveness",
    "valence": "valence",
    "length": "length",
    "acousticness": "acousticness",
    "speechiness": "speechiness",
    "popularity": "popularity",
}

STRING_FIELDS = frozenset({"trackName", "artistName", "genre"})
INTEGER_FIELDS = frozenset({"id"})
