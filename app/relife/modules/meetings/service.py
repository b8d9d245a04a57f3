from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.relife.audit import record_event
from app.relife.db import flush_or_conflict
from app.relife.utils import apply_changes, clean, format_date, parse_date, require_choice, require_date, require_min_length, touch

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.relife.models import User
    from app.relife.modules.meetings.models import Meeting


SCOPES = ("General Assembly", "Tha Prachan", "Rangsit", "Lampang", "Pattaya", "Executive Committee")


def validate_meeting_payload(s: "Session", payload: dict) -> list[str]:
    """Validate meeting create/update payload. Returns list of errors."""
    errors: list[str] = []
    require_date(errors, payload, "date", "Meeting date is required")
    require_min_length(errors, payload, "main_topic", 5, "Main topic must be at least 5 characters")
    require_choice(errors, payload, "scope", SCOPES, "Scope")
    return errors


def _values(payload: dict) -> dict[str, Any]:
    return {
        "date": parse_date(payload.get("date")),
        "main_topic": clean(payload.get("main_topic")),
        "scope": clean(payload.get("scope")),
    }


def create_meeting(s: "Session", payload: dict, user: "User") -> "Meeting":
    from app.relife.modules.meetings.models import Meeting

    now = datetime.utcnow()
    meeting = Meeting(**_values(payload), created_at=now, updated_at=now)
    s.add(meeting)
    flush_or_conflict(s, {})

    record_event(
        s,
        actor=user,
        action="meeting.create",
        entity_type="Meeting",
        entity_id=str(meeting.id),
        metadata={"date": str(meeting.date), "main_topic": meeting.main_topic, "scope": meeting.scope},
    )
    return meeting


def update_meeting(s: "Session", meeting: "Meeting", payload: dict, user: "User") -> "Meeting":
    changes = apply_changes(meeting, _values(payload))
    touch(meeting)
    flush_or_conflict(s, {})

    record_event(
        s,
        actor=user,
        action="meeting.edit",
        entity_type="Meeting",
        entity_id=str(meeting.id),
        metadata={"main_topic": meeting.main_topic, "changes": changes},
    )
    return meeting


def delete_meeting(s: "Session", meeting: "Meeting", user: "User") -> None:
    """Delete a meeting; attendance rows and motions go with it (ON DELETE CASCADE)."""
    meeting_id, topic = meeting.id, meeting.main_topic
    s.delete(meeting)
    flush_or_conflict(s, {})
    record_event(
        s,
        actor=user,
        action="meeting.delete",
        entity_type="Meeting",
        entity_id=str(meeting_id),
        metadata={"main_topic": topic},
    )


def meeting_rows(s: "Session") -> list[dict[str, Any]]:
    from app.relife.modules.meetings.models import Meeting

    meetings = s.query(Meeting).order_by(Meeting.date.desc(), Meeting.id.desc()).all()
    return [
        {
            "id": m.id,
            "date": m.date,
            "main_topic": m.main_topic,
            "scope": m.scope,
            "created_at": m.created_at,
        }
        for m in meetings
    ]


def meeting_choices(s: "Session") -> list[tuple[str, str]]:
    from app.relife.modules.meetings.models import Meeting

    rows = s.query(Meeting.id, Meeting.main_topic, Meeting.date).order_by(Meeting.date.desc(), Meeting.id.desc()).all()
    return [("", "Select Meeting")] + [(str(mid), f"{topic} ({format_date(d)})") for mid, topic, d in rows]


def describe_meeting(m: "Meeting") -> list[tuple[str, Any]]:
    return [
        ("Date", format_date(m.date)),
        ("Main Topic", m.main_topic),
        ("Scope", m.scope),
        ("Created", format_date(m.created_at)),
    ]


# ---------- Attendance ----------


def attendance_sheet(s: "Session", meeting: "Meeting") -> list[dict[str, Any]]:
    """
    One entry per personnel (ordered by name) with their attendance flag.
    Personnel without an attendance row count as absent.
    """
    from app.relife.modules.meetings.models import MeetingAttendance
    from app.relife.modules.personnel.models import Personnel

    recorded = {
        a.personnel_id: a.attended
        for a in s.query(MeetingAttendance).filter(MeetingAttendance.meeting_id == meeting.id).all()
    }
    people = s.query(Personnel).order_by(Personnel.name.asc(), Personnel.id.asc()).all()
    return [{"personnel": p, "attended": bool(recorded.get(p.id, False))} for p in people]


def save_attendance(
    s: "Session",
    meeting: "Meeting",
    personnel_ids: list[int],
    attended_ids: set[int],
    user: "User",
) -> dict[str, int]:
    """
    Upsert one attendance row per personnel id in `personnel_ids`.
    Ids missing from `attended_ids` are stored as absent; repeated ids count once.
    """
    from app.relife.modules.meetings.models import MeetingAttendance
    from app.relife.modules.personnel.models import Personnel

    personnel_ids = list(dict.fromkeys(personnel_ids))
    existing = {
        a.personnel_id: a
        for a in s.query(MeetingAttendance).filter(MeetingAttendance.meeting_id == meeting.id).all()
    }
    known = {pid for (pid,) in s.query(Personnel.id).filter(Personnel.id.in_(personnel_ids)).all()} if personnel_ids else set()

    inserted = updated = 0
    now = datetime.utcnow()
    for pid in personnel_ids:
        if pid not in known:
            continue
        attended = pid in attended_ids
        row = existing.get(pid)
        if row is None:
            s.add(MeetingAttendance(meeting_id=meeting.id, personnel_id=pid, attended=attended, created_at=now))
            inserted += 1
        elif row.attended != attended:
            row.attended = attended
            updated += 1
    flush_or_conflict(s, {"unique": "Attendance was changed concurrently; please retry."})

    present = sum(1 for pid in personnel_ids if pid in known and pid in attended_ids)
    record_event(
        s,
        actor=user,
        action="meeting.attendance",
        entity_type="Meeting",
        entity_id=str(meeting.id),
        metadata={"inserted": inserted, "updated": updated, "present": present},
    )
    return {"inserted": inserted, "updated": updated, "present": present}


def attendance_summary(s: "Session", meeting: "Meeting") -> dict[str, int]:
    from app.relife.modules.meetings.models import MeetingAttendance

    rows = s.query(MeetingAttendance.attended).filter(MeetingAttendance.meeting_id == meeting.id).all()
    return {"present": sum(1 for (a,) in rows if a), "recorded": len(rows)}
