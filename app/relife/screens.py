"""
Generic CRUD screen.

Every record type gets the same five routes (list, new, detail, edit,
delete). A module describes its screen with a CrudScreen (model, form
fields, table columns, service callables) and build_blueprint() turns it
into a Flask blueprint. Module-specific routes (e.g. meeting attendance)
are added to the returned blueprint by the module itself.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from flask import Blueprint, abort, current_app, flash, g, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.relife.db import RecordConflict, db_session
from app.relife.models import User
from app.relife.rbac import require_permission, user_has_permission
from app.relife.table import ColumnDescriptor, render, view_state_from_args

Choices = Sequence[tuple[str, str]]


@dataclass(frozen=True)
class FormField:
    name: str
    label: str
    kind: str = "text"  # text, textarea, select, date, number, url
    required: bool = False
    choices: Choices | Callable[[Session], Choices] | None = None
    placeholder: str = ""
    wide: bool = False

    def options(self, s: Session) -> Choices:
        if callable(self.choices):
            return self.choices(s)
        return self.choices or ()


@dataclass(frozen=True)
class RowAction:
    label: str
    endpoint: str  # relative to the screen's blueprint, e.g. ".attendance_get"
    permission: str


@dataclass
class CrudScreen:
    name: str
    title: str
    singular: str
    model: type
    permission: str
    columns: list[ColumnDescriptor]
    form_fields: list[FormField]
    list_rows: Callable[[Session], list[dict[str, Any]]]
    validate: Callable[[Session, dict], list[str]]
    create: Callable[[Session, dict, User], Any]
    update: Callable[[Session, Any, dict, User], Any]
    delete: Callable[[Session, Any, User], None]
    describe: Callable[[Any], list[tuple[str, Any]]]
    label: Callable[[Any], str] = str
    subtitle: str = ""
    defaults: dict[str, str] = field(default_factory=dict)
    row_actions: list[RowAction] = field(default_factory=list)
    detail_context: Callable[[Session, Any], dict[str, Any]] | None = None
    detail_template: str = "admin/crud/detail.html"

    @property
    def slug(self) -> str:
        return self.name.replace("_", "-")

    def endpoint(self, view: str) -> str:
        return f"{self.name}.{view}"


def current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def form_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return str(value)


def form_values(screen: CrudScreen, obj: Any) -> dict[str, str]:
    return {f.name: form_value(getattr(obj, f.name, None)) for f in screen.form_fields}


def _payload(screen: CrudScreen) -> dict[str, str | None]:
    return {f.name: request.form.get(f.name) for f in screen.form_fields}


def _get_or_404(s: Session, screen: CrudScreen, record_id: int) -> Any:
    obj = s.get(screen.model, record_id)
    if obj is None:
        abort(404)
    return obj


def build_blueprint(screen: CrudScreen) -> Blueprint:
    bp = Blueprint(screen.name, __name__)
    perm = screen.permission

    def render_form(s: Session, values: dict, obj: Any = None, status: int = 200):
        return (
            render_template(
                "admin/crud/form.html",
                screen=screen,
                fields=screen.form_fields,
                values=values,
                obj=obj,
                options={f.name: f.options(s) for f in screen.form_fields if f.kind == "select"},
            ),
            status,
        )

    # ---------- List ----------
    @require_permission(f"{perm}.view")
    def index():
        s = db_session()
        try:
            rows = screen.list_rows(s)
        except SQLAlchemyError:
            current_app.logger.exception("Failed to load %s (request_id=%s)", screen.name, getattr(g, "request_id", None))
            s.rollback()
            flash(f"Failed to load {screen.title.lower()}.", "danger")
            rows = []

        state = view_state_from_args(request.args, screen.columns, current_app.config.get("PAGE_SIZE", 10))
        result = render(rows, screen.columns, state)

        # Jinja cannot splat **kwargs in url_for; precompute link builders here.
        def page_url(page: int) -> str:
            return url_for(screen.endpoint("index"), **state.with_page(page).to_args())

        def sort_url(key: str) -> str:
            return url_for(screen.endpoint("index"), **state.toggled_sort(key).to_args())

        user = getattr(g, "current_user", None)
        actions = [a for a in screen.row_actions if user_has_permission(user, a.permission)]
        return render_template(
            "admin/crud/list.html",
            screen=screen,
            result=result,
            state=state,
            page_url=page_url,
            sort_url=sort_url,
            row_actions=actions,
        )

    # ---------- New ----------
    @require_permission(f"{perm}.create")
    def new_get():
        s = db_session()
        return render_form(s, dict(screen.defaults))

    @require_permission(f"{perm}.create")
    def new_post():
        s = db_session()
        u = current_user()
        payload = _payload(screen)

        errors = screen.validate(s, payload)
        if errors:
            for e in errors:
                flash(e, "danger")
            return render_form(s, payload, status=422)

        try:
            screen.create(s, payload, u)
            s.commit()
        except RecordConflict as e:
            current_app.logger.warning("%s create refused: %s", screen.name, e.message)
            flash(e.message, "danger")
            return render_form(s, payload, status=409)

        flash(f"{screen.singular} created successfully.", "success")
        return redirect(url_for(screen.endpoint("index")))

    # ---------- Detail ----------
    @require_permission(f"{perm}.view")
    def detail(record_id: int):
        s = db_session()
        obj = _get_or_404(s, screen, record_id)
        extra = screen.detail_context(s, obj) if screen.detail_context else {}
        return render_template(
            screen.detail_template,
            screen=screen,
            obj=obj,
            fields=screen.describe(obj),
            **extra,
        )

    # ---------- Edit ----------
    @require_permission(f"{perm}.edit")
    def edit_get(record_id: int):
        s = db_session()
        obj = _get_or_404(s, screen, record_id)
        return render_form(s, form_values(screen, obj), obj=obj)

    @require_permission(f"{perm}.edit")
    def edit_post(record_id: int):
        s = db_session()
        u = current_user()
        obj = _get_or_404(s, screen, record_id)
        payload = _payload(screen)

        errors = screen.validate(s, payload)
        if errors:
            for e in errors:
                flash(e, "danger")
            return render_form(s, payload, obj=obj, status=422)

        try:
            screen.update(s, obj, payload, u)
            s.commit()
        except RecordConflict as e:
            current_app.logger.warning("%s %s update refused: %s", screen.name, record_id, e.message)
            flash(e.message, "danger")
            return render_form(s, payload, obj=_get_or_404(s, screen, record_id), status=409)

        flash(f"{screen.singular} updated successfully.", "success")
        return redirect(url_for(screen.endpoint("index")))

    # ---------- Delete ----------
    @require_permission(f"{perm}.delete")
    def delete(record_id: int):
        s = db_session()
        u = current_user()
        obj = _get_or_404(s, screen, record_id)
        try:
            screen.delete(s, obj, u)
            s.commit()
        except RecordConflict as e:
            current_app.logger.warning("%s %s delete refused: %s", screen.name, record_id, e.message)
            flash(e.message, "danger")
            return redirect(url_for(screen.endpoint("index")))

        flash(f"{screen.singular} deleted successfully.", "success")
        return redirect(url_for(screen.endpoint("index")))

    slug = screen.slug
    bp.add_url_rule(f"/{slug}", "index", index, methods=["GET"])
    bp.add_url_rule(f"/{slug}/new", "new_get", new_get, methods=["GET"])
    bp.add_url_rule(f"/{slug}/new", "new_post", new_post, methods=["POST"])
    bp.add_url_rule(f"/{slug}/<int:record_id>", "detail", detail, methods=["GET"])
    bp.add_url_rule(f"/{slug}/<int:record_id>/edit", "edit_get", edit_get, methods=["GET"])
    bp.add_url_rule(f"/{slug}/<int:record_id>/edit", "edit_post", edit_post, methods=["POST"])
    bp.add_url_rule(f"/{slug}/<int:record_id>/delete", "delete", delete, methods=["POST"])
    return bp
