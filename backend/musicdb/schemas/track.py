"""
Music DB API - Pydantic Response Schemas
==========================================

What:  Pydantic models defining what the API returns.
Why:   Column names are snake_case; the published JSON uses the dataset's
       camelCase names (`trackName`, `_id`). Serialization aliases bridge
       the two without renaming columns.
How:   Built from ORM rows with `model_validate(row)`; FastAPI serializes by alias.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_serializer

AUDIO_FEATURES = (
    "bpm", "energy", "danceability", "loudness", "liveness",
    "valence", "length", "acousticness", "speechiness", "popularity",
)


class TrackResponse(BaseModel):
    """One track, as returned by every /songs endpoint."""

    object_id: str = Field(serialization_alias="_id", description="Internal identifier")
    source_id: Optional[int] = Field(default=None, serialization_alias="id")
    track_name: Optional[str] = Field(default=None, serialization_alias="trackName")
    artist_name: Optional[str] = Field(default=None, serialization_alias="artistName")
    genre: Optional[str] = None
    bpm: Optional[float] = None
    energy: Optional[float] = None
    danceability: Optional[float] = None
    loudness: Optional[float] = None
    liveness: Optional[float] = None
    valence: Optional[float] = None
    length: Optional[float] = None
    acousticness: Optional[float] = None
    speechiness: Optional[float] = None
    popularity: Optional[float] = None

    model_config = {"from_attributes": True}

    @field_serializer(*AUDIO_FEATURES, when_used="json")
    def whole_numbers_as_int(self, value: Optional[float]) -> Optional[Union[int, float]]:
        """Columns are floats, but the dataset's whole numbers go out as 95, not 95.0."""
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


class EndpointResponse(BaseModel):
    """One registered route, as listed by GET /endpoints."""

    path: str
    methods: List[str]


class ErrorResponse(BaseModel):
    """
    Error body shared by every failing endpoint.

    `error` is free text ("Invalid id", "Title not found"); clients match on it.
    """

    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    track_count: Optional[int] = Field(
        default=None, description="Rows in the tracks table (null when disconnected)"
    )
    uptime_seconds: float = Field(description="Seconds since service started")
