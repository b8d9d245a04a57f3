from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.relife.audit import record_event
from app.relife.db import flush_or_conflict
from app.relife.utils import (
    apply_changes,
    clean,
    clean_or_none,
    format_date,
    optional_url,
    parse_date,
    require_date,
    require_min_length,
    touch,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.relife.models import User
    from app.relife.modules.news.models import News


def validate_news_payload(s: "Session", payload: dict) -> list[str]:
    """Validate news create/update payload. Returns list of errors."""
    errors: list[str] = []
    require_min_length(errors, payload, "title", 5, "Title must be at least 5 characters")
    require_min_length(errors, payload, "content", 20, "Content must be at least 20 characters")
    require_date(errors, payload, "publish_date", "Publish date is required")
    optional_url(errors, payload, "image_url", "Image URL")
    return errors


def _values(payload: dict) -> dict[str, Any]:
    return {
        "title": clean(payload.get("title")),
        "content": clean(payload.get("content")),
        "publish_date": parse_date(payload.get("publish_date")),
        "image_url": clean_or_none(payload.get("image_url")),
    }


def create_news(s: "Session", payload: dict, user: "User") -> "News":
    from app.relife.modules.news.models import News

    now = datetime.utcnow()
    item = News(**_values(payload), created_at=now, updated_at=now)
    s.add(item)
    flush_or_conflict(s, {})

    record_event(
        s,
        actor=user,
        action="news.create",
        entity_type="News",
        entity_id=str(item.id),
        metadata={"title": item.title, "publish_date": str(item.publish_date)},
    )
    return item


def update_news(s: "Session", item: "News", payload: dict, user: "User") -> "News":
    changes = apply_changes(item, _values(payload))
    touch(item)
    flush_or_conflict(s, {})

    record_event(
        s,
        actor=user,
        action="news.edit",
        entity_type="News",
        entity_id=str(item.id),
        metadata={"title": item.title, "changes": changes},
    )
    return item


def delete_news(s: "Session", item: "News", user: "User") -> None:
    item_id, title = item.id, item.title
    s.delete(item)
    flush_or_conflict(s, {})
    record_event(s, actor=user, action="news.delete", entity_type="News", entity_id=str(item_id), metadata={"title": title})


def news_rows(s: "Session") -> list[dict[str, Any]]:
    from app.relife.modules.news.models import News

    items = s.query(News).order_by(News.publish_date.desc(), News.id.desc()).all()
    return [
        {
            "id": n.id,
            "title": n.title,
            "content": n.content,
            "publish_date": n.publish_date,
            "image_url": n.image_url,
            "created_at": n.created_at,
        }
        for n in items
    ]


def describe_news(n: "News") -> list[tuple[str, Any]]:
    return [
        ("Title", n.title),
        ("Publish Date", format_date(n.publish_date)),
        ("Image", n.image_url or "No Image"),
        ("Content", n.content),
    ]
