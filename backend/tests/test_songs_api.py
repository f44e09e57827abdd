"""
Music DB API - Endpoint Integration Tests
===========================================

What we test:
    ✅ Greeting and route listing
    ✅ GET /songs filters, as clients see them (camelCase JSON, _id)
    ✅ id/title lookups: 200, 400, 404 bodies
    ✅ artist/genre lookups always answer 200 with a list
    ✅ Request ids on every response

How:
    HTTPX AsyncClient over ASGITransport against the sample catalog.
"""

import pytest

from musicdb.routes.root import GREETING
from musicdb.schemas.track import TrackResponse

TRACK_KEYS = {
    "_id", "id", "trackName", "artistName", "genre", "bpm", "energy",
    "danceability", "loudness", "liveness", "valence", "length",
    "acousticness", "speechiness", "popularity",
}


class TestRoot:

    @pytest.mark.asyncio
    async def test_greeting(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.text == GREETING
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_endpoint_listing(self, client):
        response = await client.get("/endpoints")
        assert response.status_code == 200
        listing = {item["path"]: item["methods"] for item in response.json()}
        for path in (
            "/",
            "/endpoints",
            "/songs",
            "/songs/id/{track_id}",
            "/songs/title/{track_name}",
            "/songs/artist/{artist_name}",
            "/songs/genre/{genre}",
            "/health",
        ):
            assert listing[path] == ["GET"]

    @pytest.mark.asyncio
    async def test_endpoint_listing_skips_documentation(self, client):
        paths = [item["path"] for item in (await client.get("/endpoints")).json()]
        assert "/docs" not in paths
        assert "/openapi.json" not in paths
        assert paths.index("/") < paths.index("/songs") < paths.index("/health")

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        response = await client.get("/", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client):
        response = await client.get("/")
        assert response.headers["X-Request-ID"]


class TestListSongs:

    @pytest.mark.asyncio
    async def test_all_tracks_wire_format(self, client, seeded):
        response = await client.get("/songs")
        assert response.status_code == 200
        body = response.json()
        assert len(body) == 5
        first = body[0]
        assert set(first) == TRACK_KEYS
        assert first["id"] == 1
        assert first["trackName"] == "Song A"
        assert first["artistName"] == "X"
        assert first["bpm"] == 120
        assert len(first["_id"]) == 24

    @pytest.mark.asyncio
    async def test_empty_catalog(self, client):
        response = await client.get("/songs")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_exact_filters(self, client, seeded):
        response = await client.get("/songs", params={"genre": "Pop", "artistName": "Y"})
        assert [t["trackName"] for t in response.json()] == ["Song C"]

    @pytest.mark.asyncio
    async def test_repeated_key(self, client, seeded):
        response = await client.get("/songs?genre=Rock&genre=Latin")
        assert [t["id"] for t in response.json()] == [2, 4]

    @pytest.mark.asyncio
    async def test_bpm_threshold_ignores_other_filters(self, client, seeded):
        response = await client.get("/songs", params={"bpm": "100", "genre": "Rock"})
        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [1, 4]

    @pytest.mark.asyncio
    async def test_whole_numbers_serialize_as_integers(self, client, seeded):
        first = (await client.get("/songs")).json()[0]
        assert isinstance(first["bpm"], int)
        assert isinstance(first["loudness"], int)
        assert first["loudness"] == -6

    @pytest.mark.asyncio
    async def test_oversized_integer_filter_is_empty_200(self, client, seeded):
        response = await client.get("/songs", params={"id": "100000000000000000000"})
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_unknown_field(self, client, seeded):
        response = await client.get("/songs", params={"mood": "happy"})
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_track_without_bpm_serializes_null(self, client, seeded):
        response = await client.get("/songs?bpm=")
        body = response.json()
        assert [t["trackName"] for t in body] == ["Quiet One"]
        assert body[0]["bpm"] is None

    @pytest.mark.asyncio
    async def test_bad_number_is_400(self, client, seeded):
        response = await client.get("/songs", params={"energy": "loud"})
        assert response.status_code == 400
        body = response.json()
        assert "energy" in body["error"]
        assert body["request_id"] == response.headers["X-Request-ID"]


class TestSongById:

    @pytest.mark.asyncio
    async def test_found(self, client, seeded):
        listing = (await client.get("/songs")).json()
        response = await client.get(f"/songs/id/{listing[3]['_id']}")
        assert response.status_code == 200
        assert response.json() == listing[3]

    @pytest.mark.asyncio
    async def test_malformed_is_400(self, client, seeded):
        response = await client.get("/songs/id/bad")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid id"

    @pytest.mark.asyncio
    async def test_absent_is_404(self, client, seeded):
        response = await client.get("/songs/id/000000000000000000000000")
        assert response.status_code == 404
        assert response.json()["error"] == "Id does not exist"

    @pytest.mark.asyncio
    async def test_twelve_character_id_is_404(self, client, seeded):
        response = await client.get("/songs/id/aaaaaaaaaaaa")
        assert response.status_code == 404
        assert response.json()["error"] == "Id does not exist"


class TestSongByTitle:

    @pytest.mark.asyncio
    async def test_first_match(self, client, seeded):
        response = await client.get("/songs/title/Song A")
        assert response.status_code == 200
        assert response.json()["artistName"] == "X"

    @pytest.mark.asyncio
    async def test_absent_is_404(self, client, seeded):
        response = await client.get("/songs/title/Nope")
        assert response.status_code == 404
        assert response.json()["error"] == "Title not found"


class TestArtistAndGenre:

    @pytest.mark.asyncio
    async def test_artist(self, client, seeded):
        response = await client.get("/songs/artist/X")
        assert [t["trackName"] for t in response.json()] == ["Song A", "Song B"]

    @pytest.mark.asyncio
    async def test_unknown_artist_is_empty_200(self, client, seeded):
        response = await client.get("/songs/artist/Nobody")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_genre(self, client, seeded):
        response = await client.get("/songs/genre/Pop")
        assert [t["id"] for t in response.json()] == [1, 3]

    @pytest.mark.asyncio
    async def test_unknown_genre_is_empty_200(self, client, seeded):
        response = await client.get("/songs/genre/Polka")
        assert response.status_code == 200
        assert response.json() == []


class TestTrackResponse:

    def test_fractional_features_keep_their_fraction(self):
        track = TrackResponse(object_id="a" * 24, bpm=95.0, loudness=-5.5, energy=None)
        body = track.model_dump(mode="json", by_alias=True)
        assert body["bpm"] == 95 and isinstance(body["bpm"], int)
        assert body["loudness"] == -5.5
        assert body["energy"] is None
        assert body["_id"] == "a" * 24

    def test_python_dump_keeps_floats(self):
        track = TrackResponse(object_id="a" * 24, bpm=95.0)
        assert isinstance(track.model_dump()["bpm"], float)
