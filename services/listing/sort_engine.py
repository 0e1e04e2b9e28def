from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from domain.value_objects import SortState

SORTABLE_KEYS = (
    "applicant",
    "phone",
    "vendor_name",
    "vendor_rep",
    "contact_person",
    "createdAt",
    "ownerName",
    "status",
    "workers",
)


# spreadsheet round-trips rewrite ISO stamps as e.g. "2024/3/1 08:00"
SLASH_FORMATS = ("%Y/%m/%d %H:%M:%S", "%Y/%m/%d %H:%M", "%Y/%m/%d")


def _parse(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in SLASH_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _timestamp(value: Any) -> float:
    if not value:
        return 0.0
    dt = _parse(str(value).strip())
    if dt is None:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def sort_key(key: str):
    if key == "workers":
        return lambda item: len(item.get("workers") or [])
    if key == "createdAt":
        return lambda item: _timestamp(item.get("createdAt"))
    return lambda item: str(item.get(key) or "").casefold()


def sort_applications(
    items: Sequence[Mapping[str, Any]], state: SortState
) -> list[Mapping[str, Any]]:
    """Ordered copy of ``items``; ties keep their input order in either direction."""
    return sorted(items, key=sort_key(state.key), reverse=state.direction == "desc")
