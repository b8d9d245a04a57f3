import pytest

from app.relife.models import Base, Permission, Role, User
from scripts.init_db import permission_catalog, seed


def test_permission_catalog_covers_every_screen():
    keys = {k for k, _ in permission_catalog()}
    for prefix in ("personnel", "committees", "meetings", "motions", "policies", "news", "events"):
        for action in ("view", "create", "edit", "delete"):
            assert f"{prefix}.{action}" in keys
    assert "admin.view" in keys
    assert "meetings.attendance" in keys


def test_seed_is_idempotent(tmp_path):
    from sqlalchemy import create_engine
    from sqlalchemy.orm import Session

    engine = create_engine(f"sqlite:///{tmp_path/'seed.db'}", future=True)
    Base.metadata.create_all(bind=engine)

    with Session(engine) as s:
        seed(s, admin_email="admin@example.com", admin_password="first")
        s.commit()
    with Session(engine) as s:
        seed(s, admin_email="admin@example.com", admin_password="second")
        s.commit()

    with Session(engine) as s:
        assert s.query(User).count() == 1
        assert s.query(Role).count() == 1
        assert s.query(Permission).count() == len(permission_catalog())
        user = s.query(User).one()
        assert [r.key for r in user.roles] == ["admin"]
        # Existing password is kept.
        from werkzeug.security import check_password_hash

        assert check_password_hash(user.password_hash, "first")


def test_release_requires_postgres_in_production(monkeypatch):
    from scripts.release import release_database_url

    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError, match="DATABASE_URL must be set"):
        release_database_url()

    monkeypatch.setenv("DATABASE_URL", "sqlite:///relife.db")
    monkeypatch.setenv("ENV", "production")
    with pytest.raises(RuntimeError, match="Postgres"):
        release_database_url()

    monkeypatch.setenv("ENV", "development")
    assert release_database_url() == "sqlite:///relife.db"

    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("DATABASE_URL", " postgresql+psycopg://relife@db/relife ")
    assert release_database_url() == "postgresql+psycopg://relife@db/relife"
