from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.relife.audit import record_event
from app.relife.db import flush_or_conflict
from app.relife.utils import (
    apply_changes,
    clean,
    clean_or_none,
    optional_url,
    parse_int,
    require_choice,
    require_min_length,
    touch,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.relife.models import User
    from app.relife.modules.personnel.models import Personnel


CAMPUSES = ("Tha Prachan", "Rangsit", "Lampang", "Pattaya")
GENDERS = ("Male", "Female", "Other")
MIN_YEAR, MAX_YEAR = 1, 10

REFERENCED = (
    "This person cannot be deleted as they are referenced in other records "
    "(e.g., as a proposer of a motion)."
)


def validate_personnel_payload(s: "Session", payload: dict) -> list[str]:
    """Validate personnel create/update payload. Returns list of errors."""
    from app.relife.modules.committees.models import Committee

    errors: list[str] = []
    require_min_length(errors, payload, "name", 2, "Name must be at least 2 characters")
    require_min_length(errors, payload, "party_position", 2, "Party position is required")
    require_min_length(errors, payload, "bio", 10, "Bio must be at least 10 characters")
    require_choice(errors, payload, "campus", CAMPUSES, "Campus")
    require_min_length(errors, payload, "faculty", 2, "Faculty is required")

    year = parse_int(payload.get("year"))
    if year is None or not (MIN_YEAR <= year <= MAX_YEAR):
        errors.append(f"Year must be between {MIN_YEAR} and {MAX_YEAR}")

    require_choice(errors, payload, "gender", GENDERS, "Gender")
    optional_url(errors, payload, "profile_image_url", "Profile image URL")

    committee_raw = clean(payload.get("committee_id"))
    if committee_raw:
        committee_id = parse_int(committee_raw)
        if committee_id is None or s.get(Committee, committee_id) is None:
            errors.append("Selected committee does not exist.")
    return errors


def _values(payload: dict) -> dict[str, Any]:
    return {
        "name": clean(payload.get("name")),
        "party_position": clean(payload.get("party_position")),
        "student_council_position": clean_or_none(payload.get("student_council_position")),
        "bio": clean(payload.get("bio")),
        "campus": clean(payload.get("campus")),
        "faculty": clean(payload.get("faculty")),
        "year": parse_int(payload.get("year")),
        "gender": clean(payload.get("gender")),
        "profile_image_url": clean_or_none(payload.get("profile_image_url")),
        "committee_id": parse_int(payload.get("committee_id")),
    }


def create_personnel(s: "Session", payload: dict, user: "User") -> "Personnel":
    from app.relife.modules.personnel.models import Personnel

    now = datetime.utcnow()
    person = Personnel(**_values(payload), created_at=now, updated_at=now)
    s.add(person)
    flush_or_conflict(s, {"foreign_key": "Selected committee does not exist."})

    record_event(
        s,
        actor=user,
        action="personnel.create",
        entity_type="Personnel",
        entity_id=str(person.id),
        metadata={"name": person.name, "party_position": person.party_position},
    )
    return person


def update_personnel(s: "Session", person: "Personnel", payload: dict, user: "User") -> "Personnel":
    changes = apply_changes(person, _values(payload))
    touch(person)
    flush_or_conflict(s, {"foreign_key": "Selected committee does not exist."})

    record_event(
        s,
        actor=user,
        action="personnel.edit",
        entity_type="Personnel",
        entity_id=str(person.id),
        metadata={"name": person.name, "changes": changes},
    )
    return person


def delete_personnel(s: "Session", person: "Personnel", user: "User") -> None:
    person_id, name = person.id, person.name
    s.delete(person)
    flush_or_conflict(s, {"foreign_key": REFERENCED}, default=REFERENCED)
    record_event(
        s,
        actor=user,
        action="personnel.delete",
        entity_type="Personnel",
        entity_id=str(person_id),
        metadata={"name": name},
    )


def personnel_rows(s: "Session") -> list[dict[str, Any]]:
    from app.relife.modules.personnel.models import Personnel

    people = s.query(Personnel).order_by(Personnel.name.asc(), Personnel.id.asc()).all()
    return [
        {
            "id": p.id,
            "name": p.name,
            "party_position": p.party_position,
            "student_council_position": p.student_council_position,
            "campus": p.campus,
            "faculty": p.faculty,
            "year": p.year,
            "gender": p.gender,
            "committee": p.committee.name if p.committee else None,
            "created_at": p.created_at,
        }
        for p in people
    ]


def personnel_choices(s: "Session") -> list[tuple[str, str]]:
    from app.relife.modules.personnel.models import Personnel

    rows = s.query(Personnel.id, Personnel.name).order_by(Personnel.name.asc()).all()
    return [("", "Select Proposer")] + [(str(pid), name) for pid, name in rows]


def describe_personnel(p: "Personnel") -> list[tuple[str, Any]]:
    return [
        ("Name", p.name),
        ("Party Position", p.party_position),
        ("Student Council Position", p.student_council_position or "None"),
        ("Campus", p.campus),
        ("Faculty", p.faculty),
        ("Year", f"Year {p.year}"),
        ("Gender", p.gender),
        ("Committee", p.committee.name if p.committee else "No Committee"),
        ("Bio", p.bio),
        ("Profile Image", p.profile_image_url or "None"),
    ]
