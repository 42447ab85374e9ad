"""Review model — one moderated rating per (student, course)."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Integer, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship

from coursehub.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    student_name = Column(String(255), nullable=False, default="")
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)  # 1-5
    comment = Column(Text, nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)  # enrollment existed at submission
    is_flagged = Column(Boolean, nullable=False, default=False)  # held for moderation
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), index=True)

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_review_student_course"),
    )

    # Relationships
    course = relationship("Course", back_populates="reviews")
