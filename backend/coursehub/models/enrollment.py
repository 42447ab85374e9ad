"""Enrollment and LessonCompletion models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship

from coursehub.database import Base


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    # Weak reference: enrollments outlive a deleted course
    course_id = Column(String(36), nullable=False, index=True)
    course_title = Column(String(255), nullable=False, default="")
    progress_percent = Column(Integer, nullable=False, default=0)
    is_completed = Column(Boolean, nullable=False, default=False)
    is_paused = Column(Boolean, nullable=False, default=False)
    certificate_id = Column(String(36), nullable=True)
    enrolled_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
    )

    # Relationships
    student = relationship("User")
    completions = relationship("LessonCompletion", back_populates="enrollment",
                               cascade="all, delete-orphan")

    @property
    def completed_lesson_ids(self) -> set[str]:
        return {c.lesson_id for c in self.completions}


class LessonCompletion(Base):
    __tablename__ = "lesson_completions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    enrollment_id = Column(String(36), ForeignKey("enrollments.id"), nullable=False, index=True)
    lesson_id = Column(String(36), ForeignKey("lessons.id"), nullable=False)
    completed_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("enrollment_id", "lesson_id", name="uq_completion_enrollment_lesson"),
    )

    # Relationships
    enrollment = relationship("Enrollment", back_populates="completions")
    lesson = relationship("Lesson", back_populates="completions")
