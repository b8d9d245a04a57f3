from __future__ import annotations

from app.relife.modules.meetings.service import meeting_choices
from app.relife.modules.motions.models import Motion
from app.relife.modules.motions.service import (
    VOTING_STATUSES,
    create_motion,
    delete_motion,
    describe_motion,
    motion_rows,
    update_motion,
    validate_motion_payload,
)
from app.relife.modules.personnel.service import personnel_choices
from app.relife.screens import CrudScreen, FormField, build_blueprint
from app.relife.table import ColumnDescriptor
from app.relife.utils import fallback, format_date


def _meeting_cell(value, row) -> str:
    if not value:
        return "Unknown"
    return f"{value} ({format_date(row.get('meeting_date'))})"


screen = CrudScreen(
    name="motions",
    title="Motions",
    singular="Motion",
    subtitle="Track motions proposed at meetings and their voting outcome",
    model=Motion,
    permission="motions",
    columns=[
        ColumnDescriptor("title", "Title", sortable=True, filterable=True),
        ColumnDescriptor("proposer", "Proposer", sortable=True, render=fallback("Unknown")),
        ColumnDescriptor("meeting", "Meeting", render=_meeting_cell),
        ColumnDescriptor("voting_status", "Status", sortable=True, filterable=True),
        ColumnDescriptor("created_at", "Created", sortable=True, render=format_date),
    ],
    form_fields=[
        FormField("title", "Title", required=True, wide=True),
        FormField("proposer_id", "Proposer", kind="select", required=True, choices=personnel_choices),
        FormField("meeting_id", "Meeting", kind="select", required=True, choices=meeting_choices),
        FormField("voting_status", "Voting Status", kind="select", required=True, choices=[(v, v) for v in VOTING_STATUSES]),
        FormField("description", "Description", kind="textarea", required=True, wide=True),
    ],
    defaults={"voting_status": "Pending"},
    list_rows=motion_rows,
    validate=validate_motion_payload,
    create=create_motion,
    update=update_motion,
    delete=delete_motion,
    describe=describe_motion,
    label=lambda m: m.title,
)

bp = build_blueprint(screen)
