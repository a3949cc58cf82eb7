"""Canonical US state names shared by ingestion and query.

Documents are partitioned by the canonical name, so both entrypoints must
normalise through :func:`normalize_state`.
"""

from __future__ import annotations

_STATES = [
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado",
    "Connecticut", "Delaware", "Florida", "Georgia", "Hawaii", "Idaho",
    "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana", "Maine",
    "Maryland", "Massachusetts", "Michigan", "Minnesota", "Mississippi",
    "Missouri", "Montana", "Nebraska", "Nevada", "New Hampshire", "New Jersey",
    "New Mexico", "New York", "North Carolina", "North Dakota", "Ohio",
    "Oklahoma", "Oregon", "Pennsylvania", "Rhode Island", "South Carolina",
    "South Dakota", "Tennessee", "Texas", "Utah", "Vermont", "Virginia",
    "Washington", "West Virginia", "Wisconsin", "Wyoming",
]  # fmt: skip

STATE_MAPPING: dict[str, str] = {name.lower(): name for name in _STATES}


def normalize_state(state: object) -> str | None:
    """Return the canonical display name for *state*, or ``None`` if unknown."""
    if not isinstance(state, str):
        return None
    return STATE_MAPPING.get(state.strip().lower())
