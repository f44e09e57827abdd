"""
Music DB API - Track Identifiers
==================================

What:  Generates and validates the 24-hex-character identifiers used as
       the tracks' primary key (`_id` in API responses).
Why:   Clients already hold ids in this format, and `/songs/id/{id}` must tell
       a malformed id (400) from a well-formed id that matches nothing (404).

Layout (12 bytes, hex encoded):
    ┌──────────────┬──────────────────┬─────────────┐
    │ 4B timestamp │ 5B process value │ 3B counter  │
    └──────────────┴──────────────────┴─────────────┘

    Ids created by one process sort in creation order, so ordering by id gives
    the collection's insertion order.

Accepted input forms:
    - 24 hex characters, either case
    - 12 single-byte characters, read as the raw 12 bytes
      ("aaaaaaaaaaaa" is the id 616161616161616161616161)
"""

import os
import re
import threading
import time

OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")
RAW_ID_LENGTH = 12

_PROCESS_UNIQUE = os.urandom(5)
_counter = int.from_bytes(os.urandom(3), "big")
_counter_lock = threading.Lock()


def new_object_id() -> str:
    """Return a fresh 24-character lowercase hex identifier."""
    global _counter
    with _counter_lock:
        _counter = (_counter + 1) % 0x1000000
        count = _counter
    raw = (
        int(time.time()).to_bytes(4, "big")
        + _PROCESS_UNIQUE
        + count.to_bytes(3, "big")
    )
    return raw.hex()


def _raw_bytes(value: str):
    if len(value) != RAW_ID_LENGTH:
        return None
    raw = value.encode("utf-8")
    return raw if len(raw) == RAW_ID_LENGTH else None


def is_valid_object_id(value: str) -> bool:
    value = value or ""
    return bool(OBJECT_ID_PATTERN.fullmatch(value)) or _raw_bytes(value) is not None


def normalize_object_id(value: str) -> str:
    """
    Return the canonical lowercase hex form of a well-formed identifier.

    Raises:
        ValueError: `value` is in neither accepted form.
    """
    if OBJECT_ID_PATTERN.fullmatch(value or ""):
        return value.lower()
    raw = _raw_bytes(value or "")
    if raw is None:
        raise ValueError(f"'{value}' is not a valid track id")
    return raw.hex()
