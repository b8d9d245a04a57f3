import secrets

from flask import Request, session


def ensure_csrf_token() -> str:
    """Ensure a CSRF token exists in the session and return it."""
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def validate_csrf(req: Request) -> bool:
    """Validate CSRF token from the X-CSRF-Token header or the form body."""
    token = req.headers.get("X-CSRF-Token") or req.form.get("csrf_token")
    return bool(token and secrets.compare_digest(token, session.get("csrf_token") or ""))
