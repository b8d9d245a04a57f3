from __future__ import annotations

from app.relife.modules.events.models import Event
from app.relife.modules.events.service import (
    create_event,
    delete_event,
    describe_event,
    event_rows,
    update_event,
    validate_event_payload,
)
from app.relife.screens import CrudScreen, FormField, build_blueprint
from app.relife.table import ColumnDescriptor
from app.relife.utils import fallback, format_date, truncate

screen = CrudScreen(
    name="events",
    title="Events",
    singular="Event",
    subtitle="Plan party events",
    model=Event,
    permission="events",
    columns=[
        ColumnDescriptor("title", "Title", sortable=True, filterable=True),
        ColumnDescriptor("event_date", "Event Date", sortable=True, render=format_date),
        ColumnDescriptor("location", "Location", sortable=True, filterable=True, render=fallback("TBA")),
        ColumnDescriptor("description", "Description", render=truncate(80)),
    ],
    form_fields=[
        FormField("title", "Title", required=True, wide=True),
        FormField("event_date", "Event Date", kind="date", required=True),
        FormField("location", "Location", placeholder="e.g., Rangsit Campus Hall"),
        FormField("description", "Description", kind="textarea", required=True, wide=True),
    ],
    list_rows=event_rows,
    validate=validate_event_payload,
    create=create_event,
    update=update_event,
    delete=delete_event,
    describe=describe_event,
    label=lambda e: e.title,
)

bp = build_blueprint(screen)
