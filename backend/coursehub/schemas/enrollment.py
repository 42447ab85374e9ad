"""Enrollment, progress and certificate schemas."""

from typing import Optional

from pydantic import BaseModel


class EnrollmentResponse(BaseModel):
    id: str
    student_id: str
    course_id: str
    course_title: str
    progress_percent: int
    is_completed: bool
    is_paused: bool
    certificate_id: Optional[str]
    enrolled_at: str
    completed_at: Optional[str]


class CertificateResponse(BaseModel):
    id: str
    certificate_number: str
    student_id: str
    student_name: str
    course_id: str
    course_title: str
    instructor_name: str
    issued_at: str


class LessonCompleteResponse(BaseModel):
    message: str
    enrollment: EnrollmentResponse
    certificate: Optional[CertificateResponse] = None


class LessonProgress(BaseModel):
    id: str
    title: str
    order: int
    is_completed: bool


class ProgressResponse(BaseModel):
    course_id: str
    course_title: str
    total_lessons: int
    completed_lessons: int
    progress_percent: int
    is_completed: bool
    is_paused: bool
    certificate_id: Optional[str]
    lessons: list[LessonProgress]
