from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.relife.models import Base, TimestampMixin

if TYPE_CHECKING:
    from app.relife.modules.personnel.models import Personnel


class Meeting(TimestampMixin, Base):
    __tablename__ = "meetings"
    __table_args__ = (
        Index("idx_meetings_date", "date"),
        Index("idx_meetings_scope", "scope"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    main_topic: Mapped[str] = mapped_column(String(512), nullable=False)
    scope: Mapped[str] = mapped_column(String(128), nullable=False)  # General Assembly or a campus


class MeetingAttendance(Base):
    __tablename__ = "meeting_attendance"
    __table_args__ = (
        UniqueConstraint("meeting_id", "personnel_id", name="uq_attendance_meeting_personnel"),
        Index("idx_attendance_meeting", "meeting_id"),
        Index("idx_attendance_personnel", "personnel_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    meeting_id: Mapped[int] = mapped_column(ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False)
    personnel_id: Mapped[int] = mapped_column(ForeignKey("personnel.id", ondelete="CASCADE"), nullable=False)
    attended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=dt.datetime.utcnow)

    personnel: Mapped["Personnel"] = relationship("Personnel", lazy="joined")
