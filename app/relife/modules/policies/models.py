from __future__ import annotations

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.relife.models import Base, TimestampMixin


class Policy(TimestampMixin, Base):
    __tablename__ = "policies"
    __table_args__ = (Index("idx_policies_title", "title"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
