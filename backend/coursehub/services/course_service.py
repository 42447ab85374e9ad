"""Course service — catalog CRUD and the approval state machine.

Draft -> PendingApproval -> Approved | Rejected, with Rejected -> PendingApproval
on resubmission. Admin review has no guard: any course can be re-judged.
"""

import logging
import math
from numbers import Real
from typing import Optional

from sqlalchemy.orm import Session

from coursehub.config import settings
from coursehub.errors import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from coursehub.models.course import Course, CourseStatus, CATEGORY_VALUES
from coursehub.models.course_material import CourseMaterial, MaterialType
from coursehub.models.lesson import Lesson
from coursehub.models.user import User
from coursehub.services import audit
from coursehub.services.result import OperationResult, service_operation

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "price", "category")
SUBMITTABLE_STATUSES = (CourseStatus.draft.value, CourseStatus.rejected.value)


def _validate_title(title: Optional[str]) -> None:
    if not title or len(title.strip()) < settings.MIN_COURSE_TITLE_LENGTH:
        raise ValidationError(
            f"Course title must be at least {settings.MIN_COURSE_TITLE_LENGTH} characters."
        )


def _validate_price(price) -> None:
    if isinstance(price, bool) or not isinstance(price, Real) or not math.isfinite(price):
        raise ValidationError("Price must be a number.")
    if price < 0:
        raise ValidationError("Price cannot be negative.")


def _validate_category(category: Optional[str]) -> None:
    if category not in CATEGORY_VALUES:
        raise ValidationError(f"Invalid category. Choose one of: {', '.join(CATEGORY_VALUES)}.")


def _require_course(db: Session, course_id: str, for_update: bool = False) -> Course:
    query = db.query(Course).filter(Course.id == course_id)
    if for_update:
        query = query.with_for_update()
    course = query.first()
    if not course:
        raise NotFoundError("Course not found.")
    return course


def _require_owner(course: Course, requester_id: Optional[str]) -> None:
    if requester_id is not None and course.instructor_id != requester_id:
        raise AuthorizationError("You can only manage your own courses.")


def _resequence(course: Course) -> None:
    for i, lesson in enumerate(course.lessons, start=1):
        lesson.order = i


def get_course(db: Session, course_id: str) -> Optional[Course]:
    return db.query(Course).filter(Course.id == course_id).first()


@service_operation
def create_course(
    db: Session,
    title: str,
    description: Optional[str],
    price: float,
    category: str,
    instructor_id: str,
    instructor_name: Optional[str] = None,
) -> OperationResult:
    """Create a course in Draft status with zeroed aggregates."""
    _validate_title(title)
    _validate_price(price)
    _validate_category(category)
    instructor = db.query(User).filter(User.id == instructor_id).first()
    if not instructor:
        raise NotFoundError("Instructor not found.")

    course = Course(
        title=title.strip(),
        description=description,
        price=float(price),
        category=category,
        instructor_id=instructor_id,
        instructor_name=instructor_name or instructor.full_name,
        status=CourseStatus.draft.value,
        total_enrollments=0,
        average_rating=0.0,
        total_ratings=0,
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    logger.info("Course %s created by %s", course.id, instructor_id)
    return OperationResult.ok("Course created as Draft.", course=course)


@service_operation
def add_lesson(
    db: Session,
    course_id: str,
    title: str,
    content: Optional[str] = None,
    duration: int = 0,
    video_url: str = "",
    is_free_preview: bool = False,
    requester_id: Optional[str] = None,
) -> OperationResult:
    """Append a lesson at the end of the course's lesson sequence."""
    course = _require_course(db, course_id, for_update=True)
    _require_owner(course, requester_id)
    if not title or not title.strip():
        raise ValidationError("Lesson title is required.")

    lesson = Lesson(
        title=title.strip(),
        content=content,
        duration=max(int(duration or 0), 0),
        video_url=video_url or "",
        is_free_preview=bool(is_free_preview),
        order=len(course.lessons) + 1,
    )
    course.lessons.append(lesson)
    db.commit()
    db.refresh(lesson)
    return OperationResult.ok(f'Lesson "{lesson.title}" added.', lesson=lesson)


@service_operation
def remove_lesson(
    db: Session,
    course_id: str,
    lesson_id: str,
    requester_id: Optional[str] = None,
) -> OperationResult:
    """Remove a lesson and close the gap in the ordering."""
    course = _require_course(db, course_id, for_update=True)
    _require_owner(course, requester_id)
    lesson = next((l for l in course.lessons if l.id == lesson_id), None)
    if not lesson:
        raise NotFoundError("Lesson not found.")

    course.lessons.remove(lesson)
    _resequence(course)
    db.commit()
    return OperationResult.ok("Lesson removed.")


@service_operation
def add_material(
    db: Session,
    course_id: str,
    material_type: str,
    title: str,
    content: Optional[str] = None,
    requester_id: Optional[str] = None,
) -> OperationResult:
    """Attach a video link, text or quiz to a course."""
    course = _require_course(db, course_id)
    _require_owner(course, requester_id)
    if material_type not in [m.value for m in MaterialType]:
        raise ValidationError("Material type must be video, text, or quiz.")
    if not title or not title.strip():
        raise ValidationError("Material title is required.")

    material = CourseMaterial(material_type=material_type, title=title.strip(), content=content)
    course.materials.append(material)
    db.commit()
    db.refresh(material)
    return OperationResult.ok(f'Material "{material.title}" added.', material=material)


@service_operation
def edit_course(
    db: Session,
    course_id: str,
    updates: dict,
    requester_id: Optional[str] = None,
) -> OperationResult:
    """Apply a partial update. Only keys present in ``updates`` are touched."""
    course = _require_course(db, course_id)
    _require_owner(course, requester_id)
    unknown = set(updates) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot edit field(s): {', '.join(sorted(unknown))}.")

    if "title" in updates:
        _validate_title(updates["title"])
        course.title = updates["title"].strip()
    if "description" in updates:
        course.description = updates["description"]
    if "price" in updates:
        _validate_price(updates["price"])
        course.price = float(updates["price"])
    if "category" in updates:
        _validate_category(updates["category"])
        course.category = updates["category"]

    db.commit()
    db.refresh(course)
    return OperationResult.ok("Course updated.", course=course)


@service_operation
def delete_course(db: Session, course_id: str, requester_id: str, is_admin: bool = False) -> OperationResult:
    """Delete a course in any status (owner or admin).

    Lessons, materials, reviews and lesson completions go with the course.
    Enrollments and certificates are kept as historical records.
    """
    course = _require_course(db, course_id, for_update=True)
    if not is_admin and course.instructor_id != requester_id:
        raise AuthorizationError("You can only delete your own courses.")

    title = course.title
    audit.record(db, "course", course.id, "deleted", requester_id,
                 old_data={"title": title, "status": course.status})
    db.delete(course)
    db.commit()
    logger.info("Course %s deleted by %s", course_id, requester_id)
    return OperationResult.ok(f'Course "{title}" deleted.')


@service_operation
def submit_for_approval(db: Session, course_id: str, instructor_id: str) -> OperationResult:
    """Draft/Rejected -> PendingApproval, owner only, at least one lesson."""
    course = _require_course(db, course_id, for_update=True)
    if course.instructor_id != instructor_id:
        raise AuthorizationError("Not your course.")
    if len(course.lessons) == 0:
        raise PreconditionError("Add at least one lesson before submitting.")
    if course.status not in SUBMITTABLE_STATUSES:
        raise InvalidStateError(f"Course is already {course.status}.")

    old_status = course.status
    course.status = CourseStatus.pending_approval.value
    audit.record(db, "course", course.id, "submitted", instructor_id,
                 old_data={"status": old_status}, new_data={"status": course.status})
    db.commit()
    logger.info("Course %s submitted for approval", course.id)
    return OperationResult.ok("Course submitted for admin approval.", course=course)


@service_operation
def review_course(db: Session, course_id: str, approve: bool, actor_id: Optional[str] = None) -> OperationResult:
    """Admin: set Approved or Rejected regardless of the current status."""
    course = _require_course(db, course_id, for_update=True)
    old_status = course.status
    course.status = CourseStatus.approved.value if approve else CourseStatus.rejected.value
    action = "approved" if approve else "rejected"
    audit.record(db, "course", course.id, action, actor_id,
                 old_data={"status": old_status}, new_data={"status": course.status})
    db.commit()
    logger.info("Course %s %s (was %s)", course.id, action, old_status)
    return OperationResult.ok(f'Course "{course.title}" {action}.', course=course)


def get_pending_courses(db: Session) -> list[Course]:
    return (
        db.query(Course)
        .filter(Course.status == CourseStatus.pending_approval.value)
        .order_by(Course.updated_at.asc())
        .all()
    )


def get_instructor_courses(db: Session, instructor_id: str) -> list[Course]:
    return (
        db.query(Course)
        .filter(Course.instructor_id == instructor_id)
        .order_by(Course.created_at.desc())
        .all()
    )


def get_approved_courses(db: Session) -> list[Course]:
    return db.query(Course).filter(Course.status == CourseStatus.approved.value).all()


def get_all_courses(db: Session) -> list[Course]:
    return db.query(Course).order_by(Course.created_at.desc()).all()


def get_categories() -> list[str]:
    return list(CATEGORY_VALUES)


def get_course_preview(db: Session, course_id: str) -> Optional[dict]:
    """Course details with only the free-preview lessons exposed."""
    course = get_course(db, course_id)
    if not course:
        return None
    return {
        "course": course,
        "preview_lessons": [l for l in course.lessons if l.is_free_preview],
        "total_lessons": len(course.lessons),
    }
