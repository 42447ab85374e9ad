"""SQLAlchemy ORM models."""

from coursehub.models.user import User, UserRole
from coursehub.models.course import Course, CourseStatus, CourseCategory
from coursehub.models.lesson import Lesson
from coursehub.models.course_material import CourseMaterial, MaterialType
from coursehub.models.enrollment import Enrollment, LessonCompletion
from coursehub.models.certificate import Certificate
from coursehub.models.review import Review
from coursehub.models.audit_log import AuditLog

__all__ = [
    "User",
    "UserRole",
    "Course",
    "CourseStatus",
    "CourseCategory",
    "Lesson",
    "CourseMaterial",
    "MaterialType",
    "Enrollment",
    "LessonCompletion",
    "Certificate",
    "Review",
    "AuditLog",
]
