from __future__ import annotations

from app.relife.modules.committees.service import committee_choices
from app.relife.modules.personnel.models import Personnel
from app.relife.modules.personnel.service import (
    CAMPUSES,
    GENDERS,
    MAX_YEAR,
    MIN_YEAR,
    create_personnel,
    delete_personnel,
    describe_personnel,
    personnel_rows,
    update_personnel,
    validate_personnel_payload,
)
from app.relife.screens import CrudScreen, FormField, build_blueprint
from app.relife.table import ColumnDescriptor
from app.relife.utils import fallback

screen = CrudScreen(
    name="personnel",
    title="Personnel",
    singular="Personnel",
    subtitle="Manage party members and their roles",
    model=Personnel,
    permission="personnel",
    columns=[
        ColumnDescriptor("name", "Name", sortable=True, filterable=True),
        ColumnDescriptor("party_position", "Party Position", sortable=True, filterable=True),
        ColumnDescriptor("campus", "Campus", sortable=True, filterable=True),
        ColumnDescriptor("faculty", "Faculty", sortable=True),
        ColumnDescriptor("year", "Year", sortable=True),
        ColumnDescriptor("committee", "Committee", render=fallback("No Committee")),
    ],
    form_fields=[
        FormField("name", "Name", required=True),
        FormField("party_position", "Party Position", required=True),
        FormField("student_council_position", "Student Council Position"),
        FormField(
            "campus",
            "Campus",
            kind="select",
            required=True,
            choices=[("", "Select Campus")] + [(c, c) for c in CAMPUSES],
        ),
        FormField("faculty", "Faculty", required=True),
        FormField(
            "year",
            "Year",
            kind="select",
            required=True,
            choices=[(str(y), f"Year {y}") for y in range(MIN_YEAR, MAX_YEAR + 1)],
        ),
        FormField("gender", "Gender", kind="select", required=True, choices=[(g, g) for g in GENDERS]),
        FormField("committee_id", "Committee", kind="select", choices=committee_choices),
        FormField("bio", "Bio", kind="textarea", required=True, wide=True),
        FormField("profile_image_url", "Profile Image URL", kind="url", wide=True),
    ],
    defaults={"year": "1", "gender": "Male"},
    list_rows=personnel_rows,
    validate=validate_personnel_payload,
    create=create_personnel,
    update=update_personnel,
    delete=delete_personnel,
    describe=describe_personnel,
    label=lambda p: p.name,
)

bp = build_blueprint(screen)
