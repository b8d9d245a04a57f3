import os
import sys
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.relife.db import enable_sqlite_foreign_keys
from app.relife.models import Permission, Role, User

# (permission prefix, display name) for every record screen.
RECORD_TYPES = (
    ("personnel", "Personnel"),
    ("committees", "Committees"),
    ("meetings", "Meetings"),
    ("motions", "Motions"),
    ("policies", "Policies"),
    ("news", "News"),
    ("events", "Events"),
)
ACTIONS = ("view", "create", "edit", "delete")


def permission_catalog() -> list[tuple[str, str]]:
    perms = [("admin.view", "Admin: view shell")]
    for prefix, label in RECORD_TYPES:
        for action in ACTIONS:
            perms.append((f"{prefix}.{action}", f"{label}: {action}"))
    perms.append(("meetings.attendance", "Meetings: record attendance"))
    return perms


@contextmanager
def _session_scope(database_url: str):
    engine = create_engine(database_url, future=True)
    if database_url.startswith("sqlite"):
        enable_sqlite_foreign_keys(engine)
    sm = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()


def seed(s: Session, *, admin_email: str, admin_password: str) -> User:
    """
    Seed permissions, the admin role and the admin user.
    Idempotent; an existing admin keeps its password.
    """

    def ensure_perm(key: str, name: str) -> Permission:
        p = s.query(Permission).filter(Permission.key == key).one_or_none()
        if not p:
            p = Permission(key=key, name=name)
            s.add(p)
        return p

    perms = [ensure_perm(key, name) for key, name in permission_catalog()]

    role_admin = s.query(Role).filter(Role.key == "admin").one_or_none()
    if not role_admin:
        role_admin = Role(key="admin", name="Administrator")
        s.add(role_admin)
    for p in perms:
        if p not in role_admin.permissions:
            role_admin.permissions.append(p)

    user = s.query(User).filter(User.email == admin_email).one_or_none()
    if not user:
        user = User(email=admin_email, password_hash=generate_password_hash(admin_password), is_active=True)
        s.add(user)
    if role_admin not in user.roles:
        user.roles.append(role_admin)
    return user


def seed_only(*, database_url: str | None = None) -> None:
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@relife.local").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///relife.db").strip()

    # Direct engine/session so this can run during release without building the app.
    with _session_scope(db_url) as s:
        seed(s, admin_email=admin_email, admin_password=admin_password)

    print("Initialized database (seed_only).")
    print(f"Admin email: {admin_email}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
