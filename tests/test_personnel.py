"""Tests for Personnel module."""
from collections import defaultdict
from datetime import date

import pytest
from werkzeug.security import generate_password_hash

from app.relife import auth, create_app
from app.relife.db import session_scope
from app.relife.models import Base, Permission, Role, User
from app.relife.modules.committees.models import Committee
from app.relife.modules.meetings.models import Meeting, MeetingAttendance
from app.relife.modules.motions.models import Motion
from app.relife.modules.personnel.models import Personnel


def _seed_all_permissions(s):
    perm_keys = [("admin.view", "Admin: view shell")]
    for action in ("view", "create", "edit", "delete"):
        perm_keys.append((f"personnel.{action}", f"Personnel: {action}"))
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


def _payload(client, **overrides):
    data = {
        "name": "Napat Srisuk",
        "party_position": "Secretary",
        "student_council_position": "",
        "bio": "Third-year law student and party secretary.",
        "campus": "Tha Prachan",
        "faculty": "Law",
        "year": "3",
        "gender": "Female",
        "committee_id": "",
        "profile_image_url": "",
        "csrf_token": _csrf(client),
    }
    data.update(overrides)
    return data


def _person(s, name="Krit P.", **kw):
    values = dict(
        name=name,
        party_position="Member",
        bio="Member of the party since first year.",
        campus="Rangsit",
        faculty="Science",
        year=1,
        gender="Male",
    )
    values.update(kw)
    p = Personnel(**values)
    s.add(p)
    s.flush()
    return p


def test_personnel_list_requires_auth(client):
    r = client.get("/admin/personnel")
    assert r.status_code in (302, 403)


def test_personnel_create_with_committee(client):
    _login(client)
    with session_scope(client.application) as s:
        c = Committee(name="Policy", description="Drafts party policy papers.")
        s.add(c)
        s.flush()
        cid = c.id

    r = client.get("/admin/personnel/new")
    assert r.status_code == 200
    assert b"Policy" in r.data  # committee option

    r = client.post("/admin/personnel/new", data=_payload(client, committee_id=str(cid)), follow_redirects=True)
    assert b"Personnel created successfully." in r.data
    assert b"Napat Srisuk" in r.data

    with session_scope(client.application) as s:
        p = s.query(Personnel).filter(Personnel.name == "Napat Srisuk").one()
        assert p.committee_id == cid
        assert p.student_council_position is None
        assert p.year == 3


def test_personnel_list_shows_no_committee_fallback(client):
    _login(client)
    with session_scope(client.application) as s:
        _person(s)
    r = client.get("/admin/personnel")
    assert b"Krit P." in r.data
    assert b"No Committee" in r.data


def test_personnel_validation(client):
    _login(client)
    r = client.post(
        "/admin/personnel/new",
        data=_payload(client, year="11", campus="Bangkok", profile_image_url="not a url", bio="short"),
    )
    assert r.status_code == 422
    assert b"Year must be between 1 and 10" in r.data
    assert b"Campus must be one of" in r.data
    assert b"Profile image URL must be a valid URL." in r.data
    assert b"Bio must be at least 10 characters" in r.data


def test_personnel_unknown_committee_rejected(client):
    _login(client)
    r = client.post("/admin/personnel/new", data=_payload(client, committee_id="42"))
    assert r.status_code == 422
    assert b"Selected committee does not exist." in r.data


def test_personnel_filter_by_campus(client):
    _login(client)
    with session_scope(client.application) as s:
        _person(s, "Alpha Rangsit", campus="Rangsit")
        _person(s, "Beta Lampang", campus="Lampang")
    r = client.get("/admin/personnel?f_campus=lamp")
    assert b"Beta Lampang" in r.data
    assert b"Alpha Rangsit" not in r.data


def test_delete_proposer_is_refused(client):
    _login(client)
    with session_scope(client.application) as s:
        p = _person(s, "Proposer Person")
        m = Meeting(date=date(2025, 3, 5), main_topic="Budget planning", scope="General Assembly")
        s.add(m)
        s.flush()
        s.add(Motion(title="Raise the budget", description="Raise the budget for outreach.", proposer_id=p.id, meeting_id=m.id))
        pid = p.id

    r = client.post(f"/admin/personnel/{pid}/delete", data={"csrf_token": _csrf(client)}, follow_redirects=True)
    assert r.status_code == 200
    assert b"cannot be deleted as they are referenced in other records" in r.data

    with session_scope(client.application) as s:
        assert s.get(Personnel, pid) is not None


def test_delete_person_removes_attendance(client):
    _login(client)
    with session_scope(client.application) as s:
        p = _person(s, "Attendee")
        m = Meeting(date=date(2025, 3, 5), main_topic="Campus outreach", scope="Rangsit")
        s.add(m)
        s.flush()
        s.add(MeetingAttendance(meeting_id=m.id, personnel_id=p.id, attended=True))
        pid = p.id

    r = client.post(f"/admin/personnel/{pid}/delete", data={"csrf_token": _csrf(client)}, follow_redirects=True)
    assert b"Personnel deleted successfully." in r.data

    with session_scope(client.application) as s:
        assert s.get(Personnel, pid) is None
        assert s.query(MeetingAttendance).count() == 0
