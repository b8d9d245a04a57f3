"""Tests for Motions module and the dashboard that summarizes them."""
from collections import defaultdict
from datetime import date

import pytest
from werkzeug.security import generate_password_hash

from app.relife import auth, create_app
from app.relife.db import session_scope
from app.relife.models import Base, Permission, Role, User
from app.relife.modules.meetings.models import Meeting
from app.relife.modules.motions.models import Motion
from app.relife.modules.personnel.models import Personnel


def _seed_all_permissions(s):
    perm_keys = [("admin.view", "Admin: view shell")]
    for action in ("view", "create", "edit", "delete"):
        perm_keys.append((f"motions.{action}", f"Motions: {action}"))
    perms = []
    for key, name in perm_keys:
        p = Permission(key=key, name=name)
        s.add(p)
        perms.append(p)
    return perms


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setattr(auth, "_login_attempts", defaultdict(list))

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        perms = _seed_all_permissions(s)
        r = Role(key="admin", name="Administrator")
        for p in perms:
            r.permissions.append(p)
        u = User(email="admin@example.com", password_hash=generate_password_hash("pw"), is_active=True)
        u.roles.append(r)
        s.add_all([r, u])

    return app.test_client()


def _login(client):
    client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"}, follow_redirects=True)


def _csrf(client):
    with client.session_transaction() as sess:
        return sess["csrf_token"]


def _seed_refs(app):
    with session_scope(app) as s:
        p = Personnel(
            name="Pim Proposer",
            party_position="President",
            bio="Party president and fourth-year student.",
            campus="Tha Prachan",
            faculty="Political Science",
            year=4,
            gender="Female",
        )
        m = Meeting(date=date(2025, 1, 20), main_topic="Annual general meeting", scope="General Assembly")
        s.add_all([p, m])
        s.flush()
        return p.id, m.id


def test_motions_list_requires_auth(client):
    r = client.get("/admin/motions")
    assert r.status_code in (302, 403)


def test_motion_create(client):
    _login(client)
    pid, mid = _seed_refs(client.application)

    r = client.get("/admin/motions/new")
    assert b"Pim Proposer" in r.data
    assert b"Annual general meeting (Jan 20, 2025)" in r.data

    r = client.post(
        "/admin/motions/new",
        data={
            "title": "Lower membership fees",
            "description": "Cut the yearly fee in half.",
            "proposer_id": str(pid),
            "meeting_id": str(mid),
            "voting_status": "Pending",
            "csrf_token": _csrf(client),
        },
        follow_redirects=True,
    )
    assert b"Motion created successfully." in r.data
    assert b"Lower membership fees" in r.data
    assert b"Pim Proposer" in r.data


def test_motion_validation(client):
    _login(client)
    r = client.post(
        "/admin/motions/new",
        data={
            "title": "Hi",
            "description": "Too short",
            "proposer_id": "",
            "meeting_id": "77",
            "voting_status": "Tabled",
            "csrf_token": _csrf(client),
        },
    )
    assert r.status_code == 422
    assert b"Title must be at least 5 characters" in r.data
    assert b"Proposer is required" in r.data
    assert b"Selected meeting does not exist." in r.data
    assert b"Voting status must be one of" in r.data


def test_motion_status_filter_and_dashboard(client):
    _login(client)
    pid, mid = _seed_refs(client.application)
    with session_scope(client.application) as s:
        for title, status in (
            ("Raise the dues", "Pending"),
            ("Adopt a new logo", "Passed"),
            ("Merge two committees", "Pending"),
            ("Cancel the retreat", "Failed"),
        ):
            s.add(Motion(title=title, description="Motion text for testing.", proposer_id=pid, meeting_id=mid, voting_status=status))

    r = client.get("/admin/motions?f_voting_status=pending")
    assert b"Raise the dues" in r.data
    assert b"Merge two committees" in r.data
    assert b"Adopt a new logo" not in r.data
    assert b"of 2" in r.data

    r = client.get("/admin/")
    assert r.status_code == 200
    assert b"<td>Pending Motions</td><td>2</td>" in r.data
    assert b"Cancel the retreat" in r.data  # recent activity


def test_motion_status_update(client):
    _login(client)
    pid, mid = _seed_refs(client.application)
    with session_scope(client.application) as s:
        m = Motion(title="Host a debate", description="Host a public debate night.", proposer_id=pid, meeting_id=mid)
        s.add(m)
        s.flush()
        motion_id = m.id

    r = client.get(f"/admin/motions/{motion_id}/edit")
    assert b'value="Pending" selected' in r.data

    r = client.post(
        f"/admin/motions/{motion_id}/edit",
        data={
            "title": "Host a debate",
            "description": "Host a public debate night.",
            "proposer_id": str(pid),
            "meeting_id": str(mid),
            "voting_status": "Passed",
            "csrf_token": _csrf(client),
        },
        follow_redirects=True,
    )
    assert b"Motion updated successfully." in r.data
    with session_scope(client.application) as s:
        assert s.get(Motion, motion_id).voting_status == "Passed"
