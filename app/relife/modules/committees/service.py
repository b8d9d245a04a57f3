from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.relife.audit import record_event
from app.relife.db import RecordConflict, flush_or_conflict
from app.relife.utils import apply_changes, clean, format_date, require_min_length, touch

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.relife.models import User
    from app.relife.modules.committees.models import Committee


DUPLICATE_NAME = "A committee with this name already exists"


def validate_committee_payload(s: "Session", payload: dict) -> list[str]:
    errors: list[str] = []
    require_min_length(errors, payload, "name", 2, "Committee name must be at least 2 characters")
    require_min_length(errors, payload, "description", 10, "Description must be at least 10 characters")
    return errors


def _values(payload: dict) -> dict[str, Any]:
    return {
        "name": clean(payload.get("name")),
        "description": clean(payload.get("description")),
    }


def _ensure_unique_name(s: "Session", name: str, exclude_id: int | None = None) -> None:
    from app.relife.modules.committees.models import Committee

    q = s.query(Committee.id).filter(Committee.name == name)
    if exclude_id is not None:
        q = q.filter(Committee.id != exclude_id)
    if q.first() is not None:
        raise RecordConflict(DUPLICATE_NAME, kind="unique")


def create_committee(s: "Session", payload: dict, user: "User") -> "Committee":
    from app.relife.modules.committees.models import Committee

    values = _values(payload)
    _ensure_unique_name(s, values["name"])
    now = datetime.utcnow()
    committee = Committee(**values, created_at=now, updated_at=now)
    s.add(committee)
    flush_or_conflict(s, {"unique": DUPLICATE_NAME})

    record_event(
        s,
        actor=user,
        action="committee.create",
        entity_type="Committee",
        entity_id=str(committee.id),
        metadata={"name": committee.name},
    )
    return committee


def update_committee(s: "Session", committee: "Committee", payload: dict, user: "User") -> "Committee":
    values = _values(payload)
    _ensure_unique_name(s, values["name"], exclude_id=committee.id)
    changes = apply_changes(committee, values)
    touch(committee)
    flush_or_conflict(s, {"unique": DUPLICATE_NAME})

    record_event(
        s,
        actor=user,
        action="committee.edit",
        entity_type="Committee",
        entity_id=str(committee.id),
        metadata={"name": committee.name, "changes": changes},
    )
    return committee


def delete_committee(s: "Session", committee: "Committee", user: "User") -> None:
    committee_id, name = committee.id, committee.name
    s.delete(committee)
    flush_or_conflict(s, {"foreign_key": "This committee is still referenced by other records."})
    record_event(
        s,
        actor=user,
        action="committee.delete",
        entity_type="Committee",
        entity_id=str(committee_id),
        metadata={"name": name},
    )


def committee_rows(s: "Session") -> list[dict[str, Any]]:
    from app.relife.modules.committees.models import Committee

    committees = s.query(Committee).order_by(Committee.name.asc()).all()
    return [
        {
            "id": c.id,
            "name": c.name,
            "description": c.description,
            "created_at": c.created_at,
            "updated_at": c.updated_at,
        }
        for c in committees
    ]


def committee_choices(s: "Session") -> list[tuple[str, str]]:
    from app.relife.modules.committees.models import Committee

    rows = s.query(Committee.id, Committee.name).order_by(Committee.name.asc()).all()
    return [("", "No Committee")] + [(str(cid), name) for cid, name in rows]


def describe_committee(c: "Committee") -> list[tuple[str, Any]]:
    return [
        ("Name", c.name),
        ("Description", c.description),
        ("Created", format_date(c.created_at)),
        ("Updated", format_date(c.updated_at)),
    ]
