from __future__ import annotations

from app.relife.modules.policies.models import Policy
from app.relife.modules.policies.service import (
    create_policy,
    delete_policy,
    describe_policy,
    policy_rows,
    update_policy,
    validate_policy_payload,
)
from app.relife.screens import CrudScreen, FormField, build_blueprint
from app.relife.table import ColumnDescriptor
from app.relife.utils import format_date, truncate

screen = CrudScreen(
    name="policies",
    title="Policies",
    singular="Policy",
    subtitle="Manage party policies",
    model=Policy,
    permission="policies",
    columns=[
        ColumnDescriptor("title", "Title", sortable=True, filterable=True),
        ColumnDescriptor("description", "Description", render=truncate(80)),
        ColumnDescriptor("created_at", "Created", sortable=True, render=format_date),
        ColumnDescriptor("updated_at", "Updated", sortable=True, render=format_date),
    ],
    form_fields=[
        FormField("title", "Title", required=True, wide=True),
        FormField("description", "Description", kind="textarea", required=True, wide=True),
    ],
    list_rows=policy_rows,
    validate=validate_policy_payload,
    create=create_policy,
    update=update_policy,
    delete=delete_policy,
    describe=describe_policy,
    label=lambda p: p.title,
)

bp = build_blueprint(screen)
