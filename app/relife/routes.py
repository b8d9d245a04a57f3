from flask import Blueprint, g, redirect, url_for

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    target = "admin.index" if getattr(g, "current_user", None) else "auth.login_get"
    return redirect(url_for(target))


@bp.get("/health")
def health():
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """Liveness check for the platform. Touches no database."""
    return "ok", 200
