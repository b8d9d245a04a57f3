from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.relife.audit import record_event
from app.relife.db import flush_or_conflict
from app.relife.utils import (
    apply_changes,
    clean,
    clean_or_none,
    format_date,
    parse_date,
    require_date,
    require_min_length,
    touch,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.relife.models import User
    from app.relife.modules.events.models import Event


def validate_event_payload(s: "Session", payload: dict) -> list[str]:
    errors: list[str] = []
    require_min_length(errors, payload, "title", 5, "Title must be at least 5 characters")
    require_min_length(errors, payload, "description", 20, "Description must be at least 20 characters")
    require_date(errors, payload, "event_date", "Event date is required")
    return errors


def _values(payload: dict) -> dict[str, Any]:
    return {
        "title": clean(payload.get("title")),
        "description": clean(payload.get("description")),
        "event_date": parse_date(payload.get("event_date")),
        "location": clean_or_none(payload.get("location")),
    }


def create_event(s: "Session", payload: dict, user: "User") -> "Event":
    from app.relife.modules.events.models import Event

    now = datetime.utcnow()
    ev = Event(**_values(payload), created_at=now, updated_at=now)
    s.add(ev)
    flush_or_conflict(s, {})

    record_event(
        s,
        actor=user,
        action="event.create",
        entity_type="Event",
        entity_id=str(ev.id),
        metadata={"title": ev.title, "event_date": str(ev.event_date)},
    )
    return ev


def update_event(s: "Session", ev: "Event", payload: dict, user: "User") -> "Event":
    changes = apply_changes(ev, _values(payload))
    touch(ev)
    flush_or_conflict(s, {})

    record_event(
        s,
        actor=user,
        action="event.edit",
        entity_type="Event",
        entity_id=str(ev.id),
        metadata={"title": ev.title, "changes": changes},
    )
    return ev


def delete_event(s: "Session", ev: "Event", user: "User") -> None:
    event_id, title = ev.id, ev.title
    s.delete(ev)
    flush_or_conflict(s, {})
    record_event(s, actor=user, action="event.delete", entity_type="Event", entity_id=str(event_id), metadata={"title": title})


def event_rows(s: "Session") -> list[dict[str, Any]]:
    from app.relife.modules.events.models import Event

    events = s.query(Event).order_by(Event.event_date.desc(), Event.id.desc()).all()
    return [
        {
            "id": e.id,
            "title": e.title,
            "description": e.description,
            "event_date": e.event_date,
            "location": e.location,
            "created_at": e.created_at,
        }
        for e in events
    ]


def describe_event(e: "Event") -> list[tuple[str, Any]]:
    return [
        ("Title", e.title),
        ("Event Date", format_date(e.event_date)),
        ("Location", e.location or "TBA"),
        ("Description", e.description),
    ]
