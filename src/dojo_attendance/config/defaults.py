"""Option lists shared by every environment unless overridden."""

from __future__ import annotations

CATEGORIES = [
    {"value": "kids", "label": "Kids", "order": 0},
    {"value": "youth", "label": "Youth", "order": 1},
    {"value": "adult", "label": "Adult", "order": 2},
    {"value": "advanced", "label": "Advanced", "order": 3},
]

BELT_LEVELS = [
    {"value": "white", "label": "White", "rank": 0, "color": "#ffffff"},
    {"value": "yellow", "label": "Yellow", "rank": 1, "color": "#ffd700"},
    {"value": "orange", "label": "Orange", "rank": 2, "color": "#ffa500"},
    {"value": "green", "label": "Green", "rank": 3, "color": "#008000"},
    {"value": "blue", "label": "Blue", "rank": 4, "color": "#0000ff"},
    {"value": "purple", "label": "Purple", "rank": 5, "color": "#800080"},
    {"value": "brown", "label": "Brown", "rank": 6, "color": "#8b4513"},
    {"value": "black", "label": "Black", "rank": 7, "color": "#000000"},
]


def csv_list(raw: str | None, fallback: list) -> list:
    """Comma separated env override (e.g. CATEGORIES=kids,adult), else the default list."""

    if not raw or not raw.strip():
        return fallback
    return [item.strip() for item in raw.split(",") if item.strip()]
