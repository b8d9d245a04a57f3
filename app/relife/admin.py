from datetime import datetime, time, timedelta

from flask import Blueprint, current_app, flash, g, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from app.relife.db import db_session
from app.relife.models import AuditEvent
from app.relife.rbac import require_permission, user_permission_keys
from app.relife.utils import parse_date

bp = Blueprint("admin", __name__)

RECENT_PER_TYPE = 3
RECENT_LIMIT = 5


def _counts(s) -> dict[str, int]:
    from app.relife.modules.committees.models import Committee
    from app.relife.modules.events.models import Event
    from app.relife.modules.meetings.models import Meeting
    from app.relife.modules.motions.models import Motion
    from app.relife.modules.news.models import News
    from app.relife.modules.personnel.models import Personnel
    from app.relife.modules.policies.models import Policy

    models = {
        "personnel": Personnel,
        "committees": Committee,
        "meetings": Meeting,
        "motions": Motion,
        "policies": Policy,
        "news": News,
        "events": Event,
    }
    return {name: s.query(model).count() for name, model in models.items()}


def recent_activity(s, limit: int = RECENT_LIMIT) -> list[dict]:
    """
    Latest meetings, motions and news merged by creation time (newest first).
    Each source contributes at most RECENT_PER_TYPE items.
    """
    from app.relife.modules.meetings.models import Meeting
    from app.relife.modules.motions.models import Motion
    from app.relife.modules.news.models import News

    items: list[dict] = []
    for m in s.query(Meeting).order_by(Meeting.created_at.desc(), Meeting.id.desc()).limit(RECENT_PER_TYPE):
        items.append(
            {
                "kind": "Meeting",
                "title": m.main_topic,
                "created_at": m.created_at,
                "url": url_for("meetings.detail", record_id=m.id),
            }
        )
    for m in s.query(Motion).order_by(Motion.created_at.desc(), Motion.id.desc()).limit(RECENT_PER_TYPE):
        items.append(
            {
                "kind": "Motion",
                "title": m.title,
                "created_at": m.created_at,
                "url": url_for("motions.detail", record_id=m.id),
            }
        )
    for n in s.query(News).order_by(News.created_at.desc(), News.id.desc()).limit(RECENT_PER_TYPE):
        items.append(
            {
                "kind": "News",
                "title": n.title,
                "created_at": n.created_at,
                "url": url_for("news.detail", record_id=n.id),
            }
        )
    items.sort(key=lambda it: it["created_at"], reverse=True)
    return items[:limit]


@bp.get("/")
@require_permission("admin.view")
def index():
    from app.relife.modules.motions.service import pending_motion_count

    s = db_session()
    try:
        counts = _counts(s)
        pending = pending_motion_count(s)
        recent = recent_activity(s)
    except SQLAlchemyError:
        current_app.logger.exception("Failed to load dashboard (request_id=%s)", getattr(g, "request_id", None))
        s.rollback()
        flash("Failed to load dashboard data.", "danger")
        counts, pending, recent = {}, 0, []

    return render_template("admin/index.html", counts=counts, pending_motions=pending, recent=recent)


@bp.get("/me")
@require_permission("admin.view")
def me():
    user = g.current_user
    role_keys = sorted({r.key for r in (user.roles or [])})
    return render_template("admin/me.html", user=user, role_keys=role_keys, perm_keys=sorted(user_permission_keys(user)))


@bp.get("/audit")
@require_permission("admin.view")
def audit_list():
    """
    Audit trail (last 200 events) filtered by:
    - action (contains)
    - actor_email (contains)
    - date range (YYYY-MM-DD, inclusive)
    """
    s = db_session()
    action = (request.args.get("action") or "").strip()
    actor_email = (request.args.get("actor_email") or "").strip()
    raw_from = (request.args.get("date_from") or "").strip()
    raw_to = (request.args.get("date_to") or "").strip()
    date_from = parse_date(raw_from)
    date_to = parse_date(raw_to)

    if raw_from and not date_from:
        flash("date_from must be YYYY-MM-DD", "danger")
    if raw_to and not date_to:
        flash("date_to must be YYYY-MM-DD", "danger")

    q = s.query(AuditEvent)
    if action:
        q = q.filter(AuditEvent.action.like(f"%{action}%"))
    if actor_email:
        q = q.filter(AuditEvent.actor_user_email.like(f"%{actor_email.lower()}%"))
    if date_from:
        q = q.filter(AuditEvent.created_at >= datetime.combine(date_from, time.min))
    if date_to:
        q = q.filter(AuditEvent.created_at < datetime.combine(date_to + timedelta(days=1), time.min))

    events = q.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(200).all()
    return render_template(
        "admin/audit/list.html",
        events=events,
        action=action,
        actor_email=actor_email,
        date_from=raw_from,
        date_to=raw_to,
    )
