"""
Music DB API - Song Route Handlers
====================================

What:  The five read endpoints over the tracks table.
How:   Each handler makes one call into TrackService. NotFoundError,
       ValidationError and QueryError raised there become 404/400 responses
       in the global exception handlers.

Lookup asymmetry:
    /songs/id and /songs/title answer 404 when nothing matches, while
    /songs/artist and /songs/genre answer 200 with []. Existing clients
    depend on both behaviours, so they are kept as published.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from musicdb.database import get_db_session
from musicdb.schemas.track import ErrorResponse, TrackResponse
from musicdb.services.track_service import track_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/songs", tags=["Songs"])


@router.get(
    "",
    response_model=List[TrackResponse],
    responses={400: {"description": "Filter value of the wrong type", "model": ErrorResponse}},
    summary="List tracks, optionally filtered",
    description=(
        "Every query-string pair is an exact-match filter on the track field of the "
        "same name (trackName, artistName, genre, energy, ...). If `bpm` is given, "
        "the other filters are ignored and tracks with a bpm strictly above it are returned."
    ),
)
async def list_songs(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> List[TrackResponse]:
    return await track_service.list_tracks(db, request.query_params.multi_items())


@router.get(
    "/id/{track_id}",
    response_model=TrackResponse,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "No track with this id", "model": ErrorResponse},
    },
    summary="Get a track by its internal id",
)
async def get_song_by_id(
    track_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> TrackResponse:
    return await track_service.get_track_by_id(db, track_id)


@router.get(
    "/title/{track_name}",
    response_model=TrackResponse,
    responses={
        400: {"description": "Lookup failed", "model": ErrorResponse},
        404: {"description": "No track with this title", "model": ErrorResponse},
    },
    summary="Get the first track with an exact (case-sensitive) title",
)
async def get_song_by_title(
    track_name: str,
    db: AsyncSession = Depends(get_db_session),
) -> TrackResponse:
    return await track_service.get_track_by_title(db, track_name)


@router.get(
    "/artist/{artist_name}",
    response_model=List[TrackResponse],
    summary="List tracks by an artist (empty list when unknown)",
)
async def list_songs_by_artist(
    artist_name: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[TrackResponse]:
    return await track_service.list_tracks_by_artist(db, artist_name)


@router.get(
    "/genre/{genre}",
    response_model=List[TrackResponse],
    summary="List tracks in a genre (empty list when unknown)",
)
async def list_songs_by_genre(
    genre: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[TrackResponse]:
    return await track_service.list_tracks_by_genre(db, genre)
