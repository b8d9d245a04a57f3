from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import abort, g, redirect, request, url_for

from app.relife.models import User


def user_permission_keys(user: User | None) -> set[str]:
    """Every permission key granted through the user's roles. Inactive users hold none."""
    if not user or not user.is_active:
        return set()
    return {perm.key for role in (user.roles or []) for perm in (role.permissions or [])}


def user_has_permission(user: User | None, permission_key: str) -> bool:
    return permission_key in user_permission_keys(user)


def _login_redirect():
    target = request.full_path or request.path
    if target.endswith("?"):
        target = target[:-1]
    return redirect(url_for("auth.login_get", next=target))


def require_permission(permission_key: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Guard a view behind one permission key.

    Anonymous or deactivated users are sent to the login page with `next` set
    to the requested path. Signed-in users lacking the key get a 403 page that
    names the missing permission.
    """

    def decorator(view: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view)
        def guarded(*args: Any, **kwargs: Any):
            user: User | None = getattr(g, "current_user", None)
            if not user or not user.is_active:
                return _login_redirect()
            if permission_key not in user_permission_keys(user):
                g.missing_permission = permission_key
                abort(403)
            return view(*args, **kwargs)

        return guarded

    return decorator
