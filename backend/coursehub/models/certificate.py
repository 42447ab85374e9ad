"""Certificate model — immutable proof of completion, one per (student, course)."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, UniqueConstraint

from coursehub.database import Base


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    certificate_number = Column(String(64), unique=True, nullable=False, index=True)
    student_id = Column(String(36), nullable=False, index=True)
    student_name = Column(String(255), nullable=False)
    # Snapshot fields so the certificate survives course deletion
    course_id = Column(String(36), nullable=False)
    course_title = Column(String(255), nullable=False)
    instructor_name = Column(String(255), nullable=False)
    issued_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_certificate_student_course"),
    )
