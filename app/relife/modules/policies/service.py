from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.relife.audit import record_event
from app.relife.db import flush_or_conflict
from app.relife.utils import apply_changes, clean, format_date, require_min_length, touch

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.relife.models import User
    from app.relife.modules.policies.models import Policy


def validate_policy_payload(s: "Session", payload: dict) -> list[str]:
    errors: list[str] = []
    require_min_length(errors, payload, "title", 5, "Title must be at least 5 characters")
    require_min_length(errors, payload, "description", 20, "Description must be at least 20 characters")
    return errors


def _values(payload: dict) -> dict[str, Any]:
    return {"title": clean(payload.get("title")), "description": clean(payload.get("description"))}


def create_policy(s: "Session", payload: dict, user: "User") -> "Policy":
    from app.relife.modules.policies.models import Policy

    now = datetime.utcnow()
    policy = Policy(**_values(payload), created_at=now, updated_at=now)
    s.add(policy)
    flush_or_conflict(s, {})
    record_event(s, actor=user, action="policy.create", entity_type="Policy", entity_id=str(policy.id), metadata={"title": policy.title})
    return policy


def update_policy(s: "Session", policy: "Policy", payload: dict, user: "User") -> "Policy":
    changes = apply_changes(policy, _values(payload))
    touch(policy)
    flush_or_conflict(s, {})
    record_event(
        s,
        actor=user,
        action="policy.edit",
        entity_type="Policy",
        entity_id=str(policy.id),
        metadata={"title": policy.title, "changes": changes},
    )
    return policy


def delete_policy(s: "Session", policy: "Policy", user: "User") -> None:
    policy_id, title = policy.id, policy.title
    s.delete(policy)
    flush_or_conflict(s, {})
    record_event(s, actor=user, action="policy.delete", entity_type="Policy", entity_id=str(policy_id), metadata={"title": title})


def policy_rows(s: "Session") -> list[dict[str, Any]]:
    from app.relife.modules.policies.models import Policy

    policies = s.query(Policy).order_by(Policy.created_at.desc(), Policy.id.desc()).all()
    return [
        {
            "id": p.id,
            "title": p.title,
            "description": p.description,
            "created_at": p.created_at,
            "updated_at": p.updated_at,
        }
        for p in policies
    ]


def describe_policy(p: "Policy") -> list[tuple[str, Any]]:
    return [
        ("Title", p.title),
        ("Description", p.description),
        ("Created", format_date(p.created_at)),
        ("Updated", format_date(p.updated_at)),
    ]
