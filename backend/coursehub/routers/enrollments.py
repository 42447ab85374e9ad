"""Enrollments router — my courses, lesson progress, pause/resume and certificates."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coursehub.database import get_db
from coursehub.middleware.auth import get_current_user
from coursehub.models.user import User
from coursehub.routers.responses import (
    certificate_to_response,
    enrollment_to_response,
    raise_for_result,
)
from coursehub.schemas.enrollment import (
    CertificateResponse,
    EnrollmentResponse,
    LessonCompleteResponse,
    ProgressResponse,
)
from coursehub.services import enrollment_service

router = APIRouter(prefix="/api/enrollments", tags=["enrollments"])


@router.get("", response_model=list[EnrollmentResponse])
def my_enrollments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [enrollment_to_response(e) for e in enrollment_service.get_student_enrollments(db, current_user.id)]


@router.get("/certificates", response_model=list[CertificateResponse])
def my_certificates(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [certificate_to_response(c) for c in enrollment_service.get_student_certificates(db, current_user.id)]


@router.get("/certificates/{certificate_id}", response_model=CertificateResponse)
def get_certificate(
    certificate_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    certificate = enrollment_service.get_certificate(db, certificate_id)
    if not certificate or certificate.student_id != current_user.id:
        raise HTTPException(status_code=404, detail="Certificate not found")
    return certificate_to_response(certificate)


@router.get("/{course_id}/progress", response_model=ProgressResponse)
def get_progress(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    progress = enrollment_service.get_progress(db, current_user.id, course_id)
    if not progress:
        raise HTTPException(status_code=404, detail="Enrollment not found")
    return ProgressResponse(**progress)


@router.post("/{course_id}/lessons/{lesson_id}/complete", response_model=LessonCompleteResponse)
def complete_lesson(
    course_id: str,
    lesson_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark a lesson completed; the response carries the certificate on course completion."""
    result = raise_for_result(enrollment_service.complete_lesson(db, current_user.id, course_id, lesson_id))
    certificate = result.get("certificate")
    return LessonCompleteResponse(
        message=result.message,
        enrollment=enrollment_to_response(result.get("enrollment")),
        certificate=certificate_to_response(certificate) if certificate else None,
    )


@router.post("/{course_id}/pause", response_model=EnrollmentResponse)
def pause(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = raise_for_result(enrollment_service.pause_enrollment(db, current_user.id, course_id))
    return enrollment_to_response(result.get("enrollment"))


@router.post("/{course_id}/resume", response_model=EnrollmentResponse)
def resume(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = raise_for_result(enrollment_service.resume_enrollment(db, current_user.id, course_id))
    return enrollment_to_response(result.get("enrollment"))
