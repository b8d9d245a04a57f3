from __future__ import annotations

from app.relife.modules.news.models import News
from app.relife.modules.news.service import (
    create_news,
    delete_news,
    describe_news,
    news_rows,
    update_news,
    validate_news_payload,
)
from app.relife.screens import CrudScreen, FormField, build_blueprint
from app.relife.table import ColumnDescriptor
from app.relife.utils import format_date, truncate


def _image_cell(value, row) -> str:
    return "Has Image" if value else "No Image"


screen = CrudScreen(
    name="news",
    title="News",
    singular="News article",
    subtitle="Publish announcements and updates",
    model=News,
    permission="news",
    columns=[
        ColumnDescriptor("title", "Title", sortable=True, filterable=True),
        ColumnDescriptor("publish_date", "Publish Date", sortable=True, render=format_date),
        ColumnDescriptor("content", "Content", render=truncate(80)),
        ColumnDescriptor("image_url", "Image", render=_image_cell),
    ],
    form_fields=[
        FormField("title", "Title", required=True, wide=True),
        FormField("publish_date", "Publish Date", kind="date", required=True),
        FormField("image_url", "Image URL", kind="url", placeholder="https://"),
        FormField("content", "Content", kind="textarea", required=True, wide=True),
    ],
    list_rows=news_rows,
    validate=validate_news_payload,
    create=create_news,
    update=update_news,
    delete=delete_news,
    describe=describe_news,
    label=lambda n: n.title,
)

bp = build_blueprint(screen)
