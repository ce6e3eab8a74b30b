"""Shared ID generator for all domain and ORM models."""

from __future__ import annotations

import uuid


def generate_id() -> str:
    """Return a new random UUID string (v4).

    Stores call this when a record is written for the first time; the
    engine itself never invents ids.
    """
    return str(uuid.uuid4())
