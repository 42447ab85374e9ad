"""Enrollment service — enrolling, lesson progress, pause/resume and certificates."""

import logging
import secrets
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from coursehub.errors import AuthorizationError, ConflictError, NotFoundError, PreconditionError
from coursehub.models.certificate import Certificate
from coursehub.models.course import Course, CourseStatus
from coursehub.models.enrollment import Enrollment, LessonCompletion
from coursehub.models.user import User
from coursehub.rounding import percent
from coursehub.services.result import OperationResult, service_operation

logger = logging.getLogger(__name__)

CERTIFICATE_NUMBER_ATTEMPTS = 5


def get_enrollment(db: Session, student_id: str, course_id: str, for_update: bool = False) -> Optional[Enrollment]:
    query = db.query(Enrollment).filter(
        Enrollment.student_id == student_id,
        Enrollment.course_id == course_id,
    )
    if for_update:
        query = query.with_for_update()
    return query.first()


def _require_enrollment(db: Session, student_id: str, course_id: str, for_update: bool = False) -> Enrollment:
    enrollment = get_enrollment(db, student_id, course_id, for_update=for_update)
    if not enrollment:
        raise NotFoundError("You are not enrolled in this course.")
    return enrollment


def _increment_enrollment_count(course: Course) -> None:
    """The only writer of Course.total_enrollments."""
    course.total_enrollments = (course.total_enrollments or 0) + 1


def _recompute_progress(enrollment: Enrollment, lesson_ids: set[str]) -> None:
    """The only writer of Enrollment.progress_percent / is_completed.

    Completion is a latch: once set, progress stays pinned at 100 even if the
    course grows new lessons afterwards.
    """
    if enrollment.is_completed:
        enrollment.progress_percent = 100
        return
    completed = len(enrollment.completed_lesson_ids & lesson_ids)
    enrollment.progress_percent = percent(completed, len(lesson_ids))
    if enrollment.progress_percent >= 100:
        enrollment.is_completed = True
        enrollment.completed_at = datetime.now(timezone.utc)


def generate_certificate_number() -> str:
    """Display number: millisecond timestamp plus a short random suffix."""
    return f"CERT-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


def _unique_certificate_number(db: Session) -> str:
    for _ in range(CERTIFICATE_NUMBER_ATTEMPTS):
        number = generate_certificate_number()
        taken = db.query(Certificate.id).filter(Certificate.certificate_number == number).first()
        if not taken:
            return number
    raise RuntimeError("Could not allocate a unique certificate number")


def _issue_certificate(db: Session, enrollment: Enrollment, course: Course) -> Certificate:
    existing = (
        db.query(Certificate)
        .filter(Certificate.student_id == enrollment.student_id, Certificate.course_id == course.id)
        .first()
    )
    if existing:
        return existing

    student = db.query(User).filter(User.id == enrollment.student_id).first()
    certificate = Certificate(
        certificate_number=_unique_certificate_number(db),
        student_id=enrollment.student_id,
        student_name=student.full_name if student else "Unknown",
        course_id=course.id,
        course_title=course.title,
        instructor_name=course.instructor_name,
    )
    db.add(certificate)
    db.flush()
    logger.info("Certificate %s issued to %s for course %s",
                certificate.certificate_number, enrollment.student_id, course.id)
    return certificate


@service_operation
def enroll(db: Session, student_id: str, course_id: str) -> OperationResult:
    """Enroll a student and bump the course's enrollment counter in one transaction."""
    course = db.query(Course).filter(Course.id == course_id).with_for_update().first()
    if not course:
        raise NotFoundError("Course not found.")
    student = db.query(User).filter(User.id == student_id).first()
    if not student:
        raise NotFoundError("Student not found.")
    if course.status != CourseStatus.approved.value:
        raise PreconditionError("This course is not available for enrollment.")
    if course.instructor_id == student_id:
        raise AuthorizationError("You cannot enroll in your own course.")
    if get_enrollment(db, student_id, course_id):
        raise ConflictError("You are already enrolled in this course.")

    enrollment = Enrollment(
        student_id=student_id,
        course_id=course_id,
        course_title=course.title,
        progress_percent=0,
        is_completed=False,
        is_paused=False,
    )
    db.add(enrollment)
    _increment_enrollment_count(course)
    db.commit()
    db.refresh(enrollment)
    logger.info("Student %s enrolled in course %s", student_id, course_id)
    return OperationResult.ok(f'Enrolled in "{course.title}"!', enrollment=enrollment)


@service_operation
def complete_lesson(db: Session, student_id: str, course_id: str, lesson_id: str) -> OperationResult:
    """Mark a lesson done and issue the certificate on the completing call only."""
    enrollment = _require_enrollment(db, student_id, course_id, for_update=True)
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFoundError("Course not found.")
    lesson = next((l for l in course.lessons if l.id == lesson_id), None)
    if not lesson:
        raise NotFoundError("Lesson not found.")

    was_completed = enrollment.is_completed
    if lesson_id not in enrollment.completed_lesson_ids:
        enrollment.completions.append(LessonCompletion(lesson_id=lesson_id))
    _recompute_progress(enrollment, {l.id for l in course.lessons})

    if enrollment.is_completed and not was_completed:
        certificate = _issue_certificate(db, enrollment, course)
        enrollment.certificate_id = certificate.id
        db.commit()
        db.refresh(enrollment)
        return OperationResult.ok(
            "Lesson completed! You have finished the course!",
            enrollment=enrollment,
            certificate=certificate,
        )

    db.commit()
    db.refresh(enrollment)
    return OperationResult.ok(
        f'Lesson "{lesson.title}" marked as completed. Progress: {enrollment.progress_percent}%',
        enrollment=enrollment,
    )


@service_operation
def pause_enrollment(db: Session, student_id: str, course_id: str) -> OperationResult:
    enrollment = _require_enrollment(db, student_id, course_id)
    enrollment.is_paused = True
    db.commit()
    return OperationResult.ok("Course paused. Resume anytime.", enrollment=enrollment)


@service_operation
def resume_enrollment(db: Session, student_id: str, course_id: str) -> OperationResult:
    enrollment = _require_enrollment(db, student_id, course_id)
    enrollment.is_paused = False
    db.commit()
    return OperationResult.ok("Course resumed!", enrollment=enrollment)


def get_progress(db: Session, student_id: str, course_id: str) -> Optional[dict]:
    """Join an enrollment with the course's current lesson list.

    Lessons added after the last completion show up as incomplete, but the
    stored progress_percent is only refreshed by the next complete_lesson call.
    """
    enrollment = get_enrollment(db, student_id, course_id)
    if not enrollment:
        return None
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        return None

    done = enrollment.completed_lesson_ids
    return {
        "course_id": course.id,
        "course_title": course.title,
        "total_lessons": len(course.lessons),
        "completed_lessons": sum(1 for l in course.lessons if l.id in done),
        "progress_percent": enrollment.progress_percent,
        "is_completed": enrollment.is_completed,
        "is_paused": enrollment.is_paused,
        "certificate_id": enrollment.certificate_id,
        "lessons": [
            {
                "id": l.id,
                "title": l.title,
                "order": l.order,
                "is_completed": l.id in done,
            }
            for l in course.lessons
        ],
    }


def get_student_enrollments(db: Session, student_id: str) -> list[Enrollment]:
    return (
        db.query(Enrollment)
        .filter(Enrollment.student_id == student_id)
        .order_by(Enrollment.enrolled_at.desc())
        .all()
    )


def get_student_certificates(db: Session, student_id: str) -> list[Certificate]:
    return (
        db.query(Certificate)
        .filter(Certificate.student_id == student_id)
        .order_by(Certificate.issued_at.desc())
        .all()
    )


def get_certificate(db: Session, certificate_id: str) -> Optional[Certificate]:
    return db.query(Certificate).filter(Certificate.id == certificate_id).first()
