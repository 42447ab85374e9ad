"""Course material model — supplementary video links, text and quizzes."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from coursehub.database import Base


class MaterialType(str, Enum):
    video = "video"
    text = "text"
    quiz = "quiz"


class CourseMaterial(Base):
    __tablename__ = "course_materials"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    material_type = Column(String(20), nullable=False)  # video | text | quiz
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)  # url for video, body for text, JSON for quiz
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationships
    course = relationship("Course", back_populates="materials")
