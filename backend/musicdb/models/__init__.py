from musicdb.models.track import Track

__all__ = ["Track"]
