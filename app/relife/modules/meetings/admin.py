from __future__ import annotations

from flask import abort, flash, redirect, render_template, request, url_for

from app.relife.db import RecordConflict, db_session
from app.relife.modules.meetings.models import Meeting
from app.relife.modules.meetings.service import (
    SCOPES,
    attendance_sheet,
    attendance_summary,
    create_meeting,
    delete_meeting,
    describe_meeting,
    meeting_rows,
    save_attendance,
    update_meeting,
    validate_meeting_payload,
)
from app.relife.rbac import require_permission
from app.relife.screens import CrudScreen, FormField, RowAction, build_blueprint, current_user
from app.relife.table import ColumnDescriptor
from app.relife.utils import format_date, parse_int


def _meeting_detail_context(s, meeting: Meeting) -> dict:
    from app.relife.modules.motions.models import Motion

    motions = s.query(Motion).filter(Motion.meeting_id == meeting.id).order_by(Motion.created_at.desc()).all()
    return {"attendance": attendance_summary(s, meeting), "motions": motions}


screen = CrudScreen(
    name="meetings",
    title="Meetings",
    singular="Meeting",
    subtitle="Schedule meetings and track attendance",
    model=Meeting,
    permission="meetings",
    columns=[
        ColumnDescriptor("date", "Date", sortable=True, render=format_date),
        ColumnDescriptor("main_topic", "Main Topic", sortable=True, filterable=True),
        ColumnDescriptor("scope", "Scope", sortable=True, filterable=True),
        ColumnDescriptor("created_at", "Created", sortable=True, render=format_date),
    ],
    form_fields=[
        FormField("date", "Meeting Date", kind="date", required=True),
        FormField("main_topic", "Main Topic", required=True, placeholder="e.g., Budget Planning for Q1"),
        FormField("scope", "Scope", kind="select", required=True, choices=[(sc, sc) for sc in SCOPES]),
    ],
    defaults={"scope": "General Assembly"},
    list_rows=meeting_rows,
    validate=validate_meeting_payload,
    create=create_meeting,
    update=update_meeting,
    delete=delete_meeting,
    describe=describe_meeting,
    label=lambda m: m.main_topic,
    row_actions=[RowAction("Attendance", ".attendance_get", "meetings.attendance")],
    detail_context=_meeting_detail_context,
    detail_template="admin/meetings/detail.html",
)

bp = build_blueprint(screen)


# ---------- Attendance ----------
@bp.get("/meetings/<int:record_id>/attendance")
@require_permission("meetings.attendance")
def attendance_get(record_id: int):
    s = db_session()
    meeting = s.get(Meeting, record_id)
    if not meeting:
        abort(404)
    return render_template(
        "admin/meetings/attendance.html",
        meeting=meeting,
        sheet=attendance_sheet(s, meeting),
    )


@bp.post("/meetings/<int:record_id>/attendance")
@require_permission("meetings.attendance")
def attendance_post(record_id: int):
    s = db_session()
    u = current_user()
    meeting = s.get(Meeting, record_id)
    if not meeting:
        abort(404)

    parsed = (parse_int(v) for v in request.form.getlist("personnel_id"))
    personnel_ids = list(dict.fromkeys(pid for pid in parsed if pid is not None))
    attended_ids = {pid for pid in personnel_ids if request.form.get(f"attended_{pid}")}

    try:
        save_attendance(s, meeting, personnel_ids, attended_ids, u)
        s.commit()
    except RecordConflict as e:
        flash(e.message, "danger")
        return redirect(url_for("meetings.attendance_get", record_id=record_id))

    flash("Attendance updated successfully.", "success")
    return redirect(url_for("meetings.detail", record_id=record_id))
