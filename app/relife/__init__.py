import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, g, render_template, request, session

from app.relife.config import load_config
from app.relife.db import init_db, teardown_db_session
from app.relife.routes import bp as routes_bp
from app.relife.auth import bp as auth_bp, load_current_user
from app.relife.admin import bp as admin_bp
from app.relife.modules.committees.admin import bp as committees_bp
from app.relife.modules.personnel.admin import bp as personnel_bp
from app.relife.modules.meetings.admin import bp as meetings_bp
from app.relife.modules.motions.admin import bp as motions_bp
from app.relife.modules.policies.admin import bp as policies_bp
from app.relife.modules.news.admin import bp as news_bp
from app.relife.modules.events.admin import bp as events_bp

# Sidebar order.
NAV_SECTIONS = (
    ("personnel", "Personnel"),
    ("committees", "Committees"),
    ("meetings", "Meetings"),
    ("motions", "Motions"),
    ("policies", "Policies"),
    ("news", "News"),
    ("events", "Events"),
)


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=8)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True

    logging.basicConfig(
        level=getattr(logging, app.config["LOG_LEVEL"], logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from app.relife.security import ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_permissions() -> dict:
        from app.relife.rbac import user_has_permission

        def has_perm(key: str) -> bool:
            return user_has_permission(getattr(g, "current_user", None), key)

        return {"has_perm": has_perm, "nav_sections": NAV_SECTIONS}

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%Y-%m-%d") -> str:
        if value is None:
            return "—"
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(("/static/", "/health", "/healthz")):
            return None
        ensure_csrf_token()
        session.permanent = True
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            # Login/logout carry no session token yet.
            if (request.endpoint or "").startswith("auth."):
                return None
            if not validate_csrf(request):
                app.logger.warning("CSRF check failed (path=%s)", request.path)
                return render_template("errors/400.html", message="CSRF token missing or invalid."), 400

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    if hasattr(os, "register_at_fork"):

        def _after_fork_child():
            engine = app.extensions.get("sqlalchemy_engine")
            if engine:
                engine.dispose()
                app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

        os.register_at_fork(after_in_child=_after_fork_child)

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    for module_bp in (committees_bp, personnel_bp, meetings_bp, motions_bp, policies_bp, news_bp, events_bp):
        app.register_blueprint(module_bp, url_prefix="/admin")

    app.before_request(load_current_user)
    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return render_template("errors/500.html"), 500

    @app.errorhandler(403)
    def _err_403(e):  # type: ignore[no-redef]
        missing = getattr(g, "missing_permission", None)
        if missing:
            app.logger.warning("Forbidden: missing_permission=%s request_id=%s", missing, getattr(g, "request_id", None))
        return render_template("errors/403.html", missing_permission=missing), 403

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(413)
    def _err_413(e):  # type: ignore[no-redef]
        return render_template("errors/400.html", message="Request too large."), 413

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")
    return app
