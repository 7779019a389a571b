"""Identifier generation helpers."""

from __future__ import annotations

import uuid


def new_id() -> str:
    """Create a UUID4-based primary key for domain rows."""
    return str(uuid.uuid4())


def new_proposal_reference() -> str:
    """Create a short human-facing proposal reference such as ``PRP-1A2B3C4D``."""
    return f"PRP-{uuid.uuid4().hex[:8].upper()}"
