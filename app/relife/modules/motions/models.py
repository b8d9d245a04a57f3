from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.relife.models import Base, TimestampMixin

if TYPE_CHECKING:
    from app.relife.modules.meetings.models import Meeting
    from app.relife.modules.personnel.models import Personnel


class Motion(TimestampMixin, Base):
    __tablename__ = "motions"
    __table_args__ = (
        CheckConstraint("voting_status IN ('Passed', 'Failed', 'Pending')", name="ck_motions_voting_status"),
        Index("idx_motions_meeting", "meeting_id"),
        Index("idx_motions_proposer", "proposer_id"),
        Index("idx_motions_status", "voting_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    voting_status: Mapped[str] = mapped_column(String(16), nullable=False, default="Pending")

    proposer_id: Mapped[int] = mapped_column(ForeignKey("personnel.id", ondelete="RESTRICT"), nullable=False)
    meeting_id: Mapped[int] = mapped_column(ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False)

    proposer: Mapped["Personnel"] = relationship("Personnel", lazy="joined")
    meeting: Mapped["Meeting"] = relationship("Meeting", lazy="joined")
