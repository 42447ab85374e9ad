"""Shared ORM -> schema conversion and result -> HTTP error mapping."""

from fastapi import HTTPException

from coursehub.errors import ErrorKind
from coursehub.models.certificate import Certificate
from coursehub.models.course import Course
from coursehub.models.enrollment import Enrollment
from coursehub.models.review import Review
from coursehub.models.user import User
from coursehub.schemas.auth import UserResponse
from coursehub.schemas.course import CourseResponse, CourseDetailResponse, LessonResponse, MaterialResponse
from coursehub.schemas.enrollment import EnrollmentResponse, CertificateResponse
from coursehub.schemas.review import ReviewResponse
from coursehub.services.result import OperationResult

ERROR_STATUS = {
    ErrorKind.validation: 400,
    ErrorKind.precondition: 422,
    ErrorKind.invalid_state: 409,
    ErrorKind.conflict: 409,
    ErrorKind.authorization: 403,
    ErrorKind.not_found: 404,
    ErrorKind.rate_limit: 429,
}


def raise_for_result(result: OperationResult) -> OperationResult:
    """Turn a failed service outcome into an HTTPException."""
    if not result.success:
        raise HTTPException(status_code=ERROR_STATUS.get(result.error, 400), detail=result.message)
    return result


def _iso(value):
    return value.isoformat() if value else None


def user_to_response(user: User) -> UserResponse:
    return UserResponse(**user.to_safe_dict())


def course_to_response(course: Course) -> CourseResponse:
    return CourseResponse(
        id=course.id,
        instructor_id=course.instructor_id,
        instructor_name=course.instructor_name,
        title=course.title,
        description=course.description,
        price=course.price,
        category=course.category,
        status=course.status,
        total_enrollments=course.total_enrollments,
        average_rating=course.average_rating,
        total_ratings=course.total_ratings,
        lessons_count=len(course.lessons) if course.lessons else 0,
        created_at=_iso(course.created_at) or "",
    )


def course_to_detail(course: Course) -> CourseDetailResponse:
    return CourseDetailResponse(
        **course_to_response(course).model_dump(),
        lessons=[LessonResponse.model_validate(l) for l in course.lessons],
        materials=[MaterialResponse.model_validate(m) for m in course.materials],
    )


def enrollment_to_response(enrollment: Enrollment) -> EnrollmentResponse:
    return EnrollmentResponse(
        id=enrollment.id,
        student_id=enrollment.student_id,
        course_id=enrollment.course_id,
        course_title=enrollment.course_title,
        progress_percent=enrollment.progress_percent,
        is_completed=enrollment.is_completed,
        is_paused=enrollment.is_paused,
        certificate_id=enrollment.certificate_id,
        enrolled_at=_iso(enrollment.enrolled_at) or "",
        completed_at=_iso(enrollment.completed_at),
    )


def certificate_to_response(certificate: Certificate) -> CertificateResponse:
    return CertificateResponse(
        id=certificate.id,
        certificate_number=certificate.certificate_number,
        student_id=certificate.student_id,
        student_name=certificate.student_name,
        course_id=certificate.course_id,
        course_title=certificate.course_title,
        instructor_name=certificate.instructor_name,
        issued_at=_iso(certificate.issued_at) or "",
    )


def review_to_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        student_id=review.student_id,
        student_name=review.student_name,
        course_id=review.course_id,
        rating=review.rating,
        comment=review.comment,
        is_verified=review.is_verified,
        is_flagged=review.is_flagged,
        created_at=_iso(review.created_at) or "",
    )
