"""Tests for Committees module."""
from collections import defaultdict

import pytest
from werkzeug.security import generate_password_hash

from app.relife import auth, create_app
from app.relife.db import session_scope
from app.relife.models import AuditEvent, Base, Permission, Role, User
from app.relife.modules.committees.models import Committee
from app.relife.modules.personnel.models import Personnel


def _seed_all_permissions(s):
    perm_keys = [
        ("admin.view", "Admin: view shell"),
        ("committees.view", "Committees: view"),
        ("committees.create", "Committees: create"),
        ("committees.edit", "Committees: edit"),
        ("committees.delete", "Committees: delete"),
    ]
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


def _create(client, name, description="Handles the party budget and fundraising."):
    return client.post(
        "/admin/committees/new",
        data={"name": name, "description": description, "csrf_token": _csrf(client)},
        follow_redirects=True,
    )


def test_committees_list_requires_auth(client):
    r = client.get("/admin/committees")
    assert r.status_code in (302, 403)


def test_committees_list_ok(client):
    _login(client)
    r = client.get("/admin/committees")
    assert r.status_code == 200
    assert b"Committees" in r.data
    assert b"Showing" in r.data


def test_committee_create(client):
    _login(client)
    r = _create(client, "Finance")
    assert r.status_code == 200
    assert b"Committee created successfully." in r.data
    assert b"Finance" in r.data

    with session_scope(client.application) as s:
        c = s.query(Committee).filter(Committee.name == "Finance").one()
        ev = s.query(AuditEvent).filter(AuditEvent.action == "committee.create").one()
        assert ev.entity_id == str(c.id)
        assert ev.actor_user_email == "admin@example.com"


def test_committee_validation_errors(client):
    _login(client)
    r = client.post(
        "/admin/committees/new",
        data={"name": "F", "description": "short", "csrf_token": _csrf(client)},
    )
    assert r.status_code == 422
    assert b"Committee name must be at least 2 characters" in r.data
    assert b"Description must be at least 10 characters" in r.data


def test_committee_duplicate_name_conflict(client):
    _login(client)
    _create(client, "Outreach")
    r = client.post(
        "/admin/committees/new",
        data={"name": "Outreach", "description": "A second committee with the same name.", "csrf_token": _csrf(client)},
    )
    assert r.status_code == 409
    assert b"A committee with this name already exists" in r.data

    with session_scope(client.application) as s:
        assert s.query(Committee).filter(Committee.name == "Outreach").count() == 1


def test_committee_edit(client):
    _login(client)
    _create(client, "Media")
    with session_scope(client.application) as s:
        cid = s.query(Committee.id).filter(Committee.name == "Media").scalar()

    r = client.get(f"/admin/committees/{cid}/edit")
    assert r.status_code == 200
    assert b"Media" in r.data

    r = client.post(
        f"/admin/committees/{cid}/edit",
        data={"name": "Media & Press", "description": "Press releases and social media.", "csrf_token": _csrf(client)},
        follow_redirects=True,
    )
    assert b"Committee updated successfully." in r.data

    with session_scope(client.application) as s:
        assert s.get(Committee, cid).name == "Media & Press"
        ev = s.query(AuditEvent).filter(AuditEvent.action == "committee.edit").one()
        assert "Media & Press" in ev.metadata_json


def test_committee_delete_unassigns_members(client):
    _login(client)
    _create(client, "Logistics")
    with session_scope(client.application) as s:
        c = s.query(Committee).filter(Committee.name == "Logistics").one()
        p = Personnel(
            name="Somchai K.",
            party_position="Member",
            bio="Second-year student interested in logistics.",
            campus="Rangsit",
            faculty="Engineering",
            year=2,
            gender="Male",
            committee_id=c.id,
        )
        s.add(p)
        s.flush()
        cid, pid = c.id, p.id

    r = client.post(f"/admin/committees/{cid}/delete", data={"csrf_token": _csrf(client)}, follow_redirects=True)
    assert b"Committee deleted successfully." in r.data

    with session_scope(client.application) as s:
        assert s.get(Committee, cid) is None
        assert s.get(Personnel, pid).committee_id is None


def test_committees_search_sort_and_paginate(client):
    _login(client)
    with session_scope(client.application) as s:
        for i in range(1, 13):
            s.add(Committee(name=f"Committee {i:02d}", description="Generic committee description."))
        s.add(Committee(name="Elections Board", description="Runs the internal party elections."))

    r = client.get("/admin/committees?q=elections")
    assert b"Elections Board" in r.data
    assert b"Committee 01" not in r.data
    assert b"Showing 1\xe2\x80\x931 of 1" in r.data

    r = client.get("/admin/committees?sort=name&dir=desc&page=2")
    assert r.status_code == 200
    assert b"Page 2 of 2" in r.data
    # Descending by name leaves the three lowest names for page 2.
    assert b"Committee 01" in r.data

    r = client.get("/admin/committees?page=99")
    assert b"Page 2 of 2" in r.data


def test_committee_detail_404(client):
    _login(client)
    r = client.get("/admin/committees/999")
    assert r.status_code == 404
