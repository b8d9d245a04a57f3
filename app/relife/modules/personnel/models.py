from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.relife.models import Base, TimestampMixin

if TYPE_CHECKING:
    from app.relife.modules.committees.models import Committee


class Personnel(TimestampMixin, Base):
    __tablename__ = "personnel"
    __table_args__ = (
        CheckConstraint("year > 0", name="ck_personnel_year_positive"),
        Index("idx_personnel_campus", "campus"),
        Index("idx_personnel_committee", "committee_id"),
        Index("idx_personnel_party_position", "party_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    party_position: Mapped[str] = mapped_column(String(255), nullable=False)
    student_council_position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str] = mapped_column(Text, nullable=False)
    campus: Mapped[str] = mapped_column(String(128), nullable=False)  # Tha Prachan, Rangsit, Lampang, Pattaya
    faculty: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str] = mapped_column(String(32), nullable=False)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    committee_id: Mapped[int | None] = mapped_column(ForeignKey("committees.id", ondelete="SET NULL"), nullable=True)
    committee: Mapped[Optional["Committee"]] = relationship("Committee", lazy="joined")
