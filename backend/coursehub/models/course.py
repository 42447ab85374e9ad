"""Course model — an instructor-owned course moving through the approval workflow."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Float, Integer
from sqlalchemy.orm import relationship

from coursehub.database import Base


class CourseStatus(str, Enum):
    draft = "Draft"
    pending_approval = "PendingApproval"
    approved = "Approved"
    rejected = "Rejected"


class CourseCategory(str, Enum):
    programming = "Programming"
    business = "Business"
    design = "Design"
    marketing = "Marketing"
    music = "Music"
    photography = "Photography"
    health = "Health & Fitness"
    personal_development = "Personal Development"
    other = "Other"


CATEGORY_VALUES = [c.value for c in CourseCategory]


class Course(Base):
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    instructor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    instructor_name = Column(String(255), nullable=False, default="")
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    category = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default=CourseStatus.draft.value, index=True)

    # Derived aggregates. Written only by enrollment_service.enroll (total_enrollments)
    # and review_service._recalculate_course_rating (average_rating, total_ratings).
    total_enrollments = Column(Integer, nullable=False, default=0)
    average_rating = Column(Float, nullable=False, default=0.0)
    total_ratings = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    instructor = relationship("User", back_populates="courses")
    lessons = relationship("Lesson", back_populates="course", order_by="Lesson.order",
                           cascade="all, delete-orphan")
    materials = relationship("CourseMaterial", back_populates="course", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="course", cascade="all, delete-orphan")
