from __future__ import annotations

from datetime import date, datetime
from typing import Any
from urllib.parse import urlparse


def clean(value: Any) -> str:
    """Form value as a stripped string ("" for None)."""
    if value is None:
        return ""
    return str(value).strip()


def clean_or_none(value: Any) -> str | None:
    return clean(value) or None


def parse_date(s: str | None) -> date | None:
    """Parse YYYY-MM-DD date string (None for blank or malformed input)."""
    s = clean(s)
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


def parse_int(s: Any) -> int | None:
    s = clean(s)
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None


def is_http_url(s: str) -> bool:
    parsed = urlparse(s)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def require_min_length(errors: list[str], payload: dict, key: str, min_len: int, message: str) -> None:
    if len(clean(payload.get(key))) < min_len:
        errors.append(message)


def require_choice(errors: list[str], payload: dict, key: str, choices: tuple[str, ...], label: str) -> None:
    value = clean(payload.get(key))
    if value not in choices:
        errors.append(f"{label} must be one of: {', '.join(choices)}")


def require_date(errors: list[str], payload: dict, key: str, message: str) -> None:
    if parse_date(payload.get(key)) is None:
        errors.append(message)


def optional_url(errors: list[str], payload: dict, key: str, label: str) -> None:
    value = clean(payload.get(key))
    if value and not is_http_url(value):
        errors.append(f"{label} must be a valid URL.")


def apply_changes(obj: Any, values: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """
    Assign `values` onto `obj`, returning {field: {"old", "new"}} for fields that changed.
    Dates are recorded as strings so the map can go straight into audit metadata.
    """
    changes: dict[str, dict[str, Any]] = {}
    for key, new in values.items():
        old = getattr(obj, key)
        if old != new:
            changes[key] = {
                "old": str(old) if isinstance(old, date) else old,
                "new": str(new) if isinstance(new, date) else new,
            }
            setattr(obj, key, new)
    return changes


def touch(obj: Any) -> None:
    obj.updated_at = datetime.utcnow()


# ---------- Column renderers ----------


def format_date(value: Any, row: Any = None) -> str:
    """Table cell for dates: "Mar 05, 2025"."""
    if value is None:
        return "—"
    if hasattr(value, "strftime"):
        return value.strftime("%b %d, %Y")
    return str(value)


def truncate(limit: int = 80):
    def _render(value: Any, row: Any = None) -> str:
        text = clean(value)
        if len(text) <= limit:
            return text
        return text[: limit - 1].rstrip() + "…"

    return _render


def fallback(text: str):
    """Renderer that shows `text` for empty values."""

    def _render(value: Any, row: Any = None) -> str:
        return clean(value) or text

    return _render
