# Services package init
"""
Music DB API - Services Layer
===============================

What:  Query and seeding logic sitting between routes (HTTP) and the database.

Service Inventory:
    - TrackService: exact-match filters, bpm threshold, id/title/artist/genre lookups
    - seed_service: bundled dataset loading and transactional reseeding

Services take an AsyncSession and return Pydantic models or raise
application exceptions; they never build HTTP responses.
"""
