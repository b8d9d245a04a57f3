from __future__ import annotations

from app.relife.modules.committees.models import Committee
from app.relife.modules.committees.service import (
    committee_rows,
    create_committee,
    delete_committee,
    describe_committee,
    update_committee,
    validate_committee_payload,
)
from app.relife.screens import CrudScreen, FormField, build_blueprint
from app.relife.table import ColumnDescriptor
from app.relife.utils import format_date, truncate

screen = CrudScreen(
    name="committees",
    title="Committees",
    singular="Committee",
    subtitle="Manage party committees",
    model=Committee,
    permission="committees",
    columns=[
        ColumnDescriptor("name", "Name", sortable=True, filterable=True),
        ColumnDescriptor("description", "Description", sortable=True, render=truncate(80)),
        ColumnDescriptor("created_at", "Created", sortable=True, render=format_date),
    ],
    form_fields=[
        FormField("name", "Committee Name", required=True, placeholder="e.g., Finance Committee"),
        FormField("description", "Description", kind="textarea", required=True, wide=True),
    ],
    list_rows=committee_rows,
    validate=validate_committee_payload,
    create=create_committee,
    update=update_committee,
    delete=delete_committee,
    describe=describe_committee,
    label=lambda c: c.name,
)

bp = build_blueprint(screen)
