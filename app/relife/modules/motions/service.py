from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.relife.audit import record_event
from app.relife.db import flush_or_conflict
from app.relife.utils import apply_changes, clean, format_date, parse_int, require_choice, require_min_length, touch

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.relife.models import User
    from app.relife.modules.motions.models import Motion


VOTING_STATUSES = ("Passed", "Failed", "Pending")
MISSING_REFERENCE = "Selected proposer or meeting no longer exists."


def validate_motion_payload(s: "Session", payload: dict) -> list[str]:
    """Validate motion create/update payload. Returns list of errors."""
    from app.relife.modules.meetings.models import Meeting
    from app.relife.modules.personnel.models import Personnel

    errors: list[str] = []
    require_min_length(errors, payload, "title", 5, "Title must be at least 5 characters")
    require_min_length(errors, payload, "description", 10, "Description must be at least 10 characters")

    proposer_id = parse_int(payload.get("proposer_id"))
    if proposer_id is None:
        errors.append("Proposer is required")
    elif s.get(Personnel, proposer_id) is None:
        errors.append("Selected proposer does not exist.")

    meeting_id = parse_int(payload.get("meeting_id"))
    if meeting_id is None:
        errors.append("Meeting is required")
    elif s.get(Meeting, meeting_id) is None:
        errors.append("Selected meeting does not exist.")

    require_choice(errors, payload, "voting_status", VOTING_STATUSES, "Voting status")
    return errors


def _values(payload: dict) -> dict[str, Any]:
    return {
        "title": clean(payload.get("title")),
        "description": clean(payload.get("description")),
        "proposer_id": parse_int(payload.get("proposer_id")),
        "meeting_id": parse_int(payload.get("meeting_id")),
        "voting_status": clean(payload.get("voting_status")) or "Pending",
    }


def create_motion(s: "Session", payload: dict, user: "User") -> "Motion":
    from app.relife.modules.motions.models import Motion

    now = datetime.utcnow()
    motion = Motion(**_values(payload), created_at=now, updated_at=now)
    s.add(motion)
    flush_or_conflict(s, {"foreign_key": MISSING_REFERENCE})

    record_event(
        s,
        actor=user,
        action="motion.create",
        entity_type="Motion",
        entity_id=str(motion.id),
        metadata={"title": motion.title, "voting_status": motion.voting_status},
    )
    return motion


def update_motion(s: "Session", motion: "Motion", payload: dict, user: "User") -> "Motion":
    changes = apply_changes(motion, _values(payload))
    touch(motion)
    flush_or_conflict(s, {"foreign_key": MISSING_REFERENCE})

    record_event(
        s,
        actor=user,
        action="motion.edit",
        entity_type="Motion",
        entity_id=str(motion.id),
        metadata={"title": motion.title, "changes": changes},
    )
    return motion


def delete_motion(s: "Session", motion: "Motion", user: "User") -> None:
    motion_id, title = motion.id, motion.title
    s.delete(motion)
    flush_or_conflict(s, {})
    record_event(
        s,
        actor=user,
        action="motion.delete",
        entity_type="Motion",
        entity_id=str(motion_id),
        metadata={"title": title},
    )


def motion_rows(s: "Session") -> list[dict[str, Any]]:
    from app.relife.modules.motions.models import Motion

    motions = s.query(Motion).order_by(Motion.created_at.desc(), Motion.id.desc()).all()
    return [
        {
            "id": m.id,
            "title": m.title,
            "description": m.description,
            "proposer": m.proposer.name if m.proposer else None,
            "meeting": m.meeting.main_topic if m.meeting else None,
            "meeting_date": m.meeting.date if m.meeting else None,
            "voting_status": m.voting_status,
            "created_at": m.created_at,
        }
        for m in motions
    ]


def pending_motion_count(s: "Session") -> int:
    from app.relife.modules.motions.models import Motion

    return s.query(Motion).filter(Motion.voting_status == "Pending").count()


def describe_motion(m: "Motion") -> list[tuple[str, Any]]:
    meeting = m.meeting
    return [
        ("Title", m.title),
        ("Status", m.voting_status),
        ("Proposer", m.proposer.name if m.proposer else "Unknown"),
        ("Meeting", f"{meeting.main_topic} ({format_date(meeting.date)})" if meeting else "Unknown"),
        ("Description", m.description),
        ("Created", format_date(m.created_at)),
    ]
