# Routes package init
"""
Music DB API - Routes Package
===============================

Route Inventory:
    - root.py:    GET /                              (greeting)
                  GET /endpoints                     (registered route listing)
    - songs.py:   GET /songs                         (filter tracks)
                  GET /songs/id/{track_id}           (lookup by internal id)
                  GET /songs/title/{track_name}      (first track with that title)
                  GET /songs/artist/{artist_name}    (tracks by artist)
                  GET /songs/genre/{genre}           (tracks in genre)
    - health.py:  GET /health                        (service health check)

Routes stay THIN: read the request, call track_service, return the result.
Status codes for failures come from the exception handlers in main.py.
"""
