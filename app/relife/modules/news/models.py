from __future__ import annotations

import datetime as dt

from sqlalchemy import Date, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.relife.models import Base, TimestampMixin


class News(TimestampMixin, Base):
    __tablename__ = "news"
    __table_args__ = (Index("idx_news_publish_date", "publish_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    publish_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
