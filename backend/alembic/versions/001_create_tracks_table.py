"""Create tracks table

Revision ID: 001
Revises: None
Create Date: 2024-03-01 00:00:00.000000+00:00

What:  Creates the `tracks` table holding the music catalog.
How:   Portable column types only, so the same migration runs on PostgreSQL
       and SQLite.

Rollback: downgrade() drops the table (the seed loader can rebuild the data).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AUDIO_FEATURES = (
    "bpm",
    "energy",
    "danceability",
    "loudness",
    "liveness",
    "valence",
    "length",
    "acousticness",
    "speechiness",
    "popularity",
)


def upgrade() -> None:
    op.create_table(
        "tracks",
        sa.Column(
            "object_id",
            sa.String(24),
            nullable=False,
            comment="Internal identifier, returned to clients as _id",
        ),
        sa.Column("source_id", sa.Integer(), nullable=True),
        sa.Column("track_name", sa.String(255), nullable=True),
        sa.Column("artist_name", sa.String(255), nullable=True),
        sa.Column("genre", sa.String(255), nullable=True),
        *[sa.Column(name, sa.Float(), nullable=True) for name in AUDIO_FEATURES],
        sa.PrimaryKeyConstraint("object_id"),
    )

    # Lookup paths: /songs/title, /songs/artist, /songs/genre, ?bpm=
    op.create_index("idx_tracks_track_name", "tracks", ["track_name"])
    op.create_index("idx_tracks_artist_name", "tracks", ["artist_name"])
    op.create_index("idx_tracks_genre", "tracks", ["genre"])
    op.create_index("idx_tracks_bpm", "tracks", ["bpm"])


def downgrade() -> None:
    op.drop_index("idx_tracks_bpm", table_name="tracks")
    op.drop_index("idx_tracks_genre", table_name="tracks")
    op.drop_index("idx_tracks_artist_name", table_name="tracks")
    op.drop_index("idx_tracks_track_name", table_name="tracks")
    op.drop_table("tracks")
