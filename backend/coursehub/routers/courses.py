"""Courses router — catalog browsing, instructor course management, enrollment and reviews."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from coursehub.database import get_db
from coursehub.middleware.auth import get_current_user, require_instructor
from coursehub.models.user import User, UserRole
from coursehub.routers.responses import (
    course_to_detail,
    course_to_response,
    enrollment_to_response,
    raise_for_result,
    review_to_response,
)
from coursehub.schemas.course import (
    CourseCreate,
    CourseUpdate,
    CourseResponse,
    CourseDetailResponse,
    CourseListResponse,
    CoursePreviewResponse,
    LessonCreate,
    LessonResponse,
    MaterialCreate,
    MaterialResponse,
    MessageResponse,
)
from coursehub.schemas.enrollment import EnrollmentResponse
from coursehub.schemas.review import ReviewCreate, ReviewResponse, ReviewSubmitResponse
from coursehub.services import course_service, enrollment_service, review_service, search_service

router = APIRouter(prefix="/api/courses", tags=["courses"])


@router.get("", response_model=CourseListResponse)
def search_courses(
    q: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    min_rating: Optional[float] = Query(None),
    min_price: Optional[float] = Query(None),
    max_price: Optional[float] = Query(None),
    sort_by: str = Query("popularity"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Search approved courses."""
    courses = search_service.search_courses(
        db,
        query=q,
        category=category,
        min_rating=min_rating,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
    )
    return CourseListResponse(courses=[course_to_response(c) for c in courses], total=len(courses))


@router.get("/categories", response_model=list[str])
def list_categories():
    return course_service.get_categories()


@router.get("/recommendations", response_model=CourseListResponse)
def recommendations(
    limit: Optional[int] = Query(None, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Approved courses the current user has not enrolled in yet."""
    courses = search_service.get_recommendations(db, current_user.id, limit=limit)
    return CourseListResponse(courses=[course_to_response(c) for c in courses], total=len(courses))


@router.get("/mine", response_model=CourseListResponse)
def my_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
):
    """Courses authored by the current instructor, any status."""
    courses = course_service.get_instructor_courses(db, current_user.id)
    return CourseListResponse(courses=[course_to_response(c) for c in courses], total=len(courses))


@router.post("", response_model=CourseResponse, status_code=201)
def create_course(
    req: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
):
    """Create a Draft course (instructor only)."""
    result = raise_for_result(course_service.create_course(
        db,
        title=req.title,
        description=req.description,
        price=req.price,
        category=req.category,
        instructor_id=current_user.id,
        instructor_name=current_user.full_name,
    ))
    return course_to_response(result.get("course"))


@router.get("/{course_id}", response_model=CoursePreviewResponse)
def get_course_preview(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Course details with free-preview lessons only."""
    preview = course_service.get_course_preview(db, course_id)
    if not preview:
        raise HTTPException(status_code=404, detail="Course not found")
    return CoursePreviewResponse(
        **course_to_response(preview["course"]).model_dump(),
        preview_lessons=[LessonResponse.model_validate(l) for l in preview["preview_lessons"]],
        total_lessons=preview["total_lessons"],
    )


@router.get("/{course_id}/content", response_model=CourseDetailResponse)
def get_course_content(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Full lesson list and materials: owner, admin, or enrolled students."""
    course = course_service.get_course(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    allowed = (
        course.instructor_id == current_user.id
        or current_user.role == UserRole.admin.value
        or enrollment_service.get_enrollment(db, current_user.id, course_id) is not None
    )
    if not allowed:
        raise HTTPException(status_code=403, detail="Enroll in this course to see all lessons")
    return course_to_detail(course)


@router.patch("/{course_id}", response_model=CourseResponse)
def edit_course(
    course_id: str,
    req: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
):
    """Partial update; fields left out of the body are untouched."""
    result = raise_for_result(course_service.edit_course(
        db, course_id, req.model_dump(exclude_unset=True), requester_id=current_user.id
    ))
    return course_to_response(result.get("course"))


@router.delete("/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a course (owner or admin)."""
    result = raise_for_result(course_service.delete_course(
        db, course_id, current_user.id, is_admin=current_user.role == UserRole.admin.value
    ))
    return MessageResponse(message=result.message)


@router.post("/{course_id}/lessons", response_model=LessonResponse, status_code=201)
def add_lesson(
    course_id: str,
    req: LessonCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
):
    result = raise_for_result(course_service.add_lesson(
        db,
        course_id,
        title=req.title,
        content=req.content,
        duration=req.duration,
        video_url=req.video_url,
        is_free_preview=req.is_free_preview,
        requester_id=current_user.id,
    ))
    return LessonResponse.model_validate(result.get("lesson"))


@router.delete("/{course_id}/lessons/{lesson_id}", response_model=MessageResponse)
def remove_lesson(
    course_id: str,
    lesson_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
):
    result = raise_for_result(course_service.remove_lesson(
        db, course_id, lesson_id, requester_id=current_user.id
    ))
    return MessageResponse(message=result.message)


@router.post("/{course_id}/materials", response_model=MaterialResponse, status_code=201)
def add_material(
    course_id: str,
    req: MaterialCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
):
    result = raise_for_result(course_service.add_material(
        db,
        course_id,
        material_type=req.material_type,
        title=req.title,
        content=req.content,
        requester_id=current_user.id,
    ))
    return MaterialResponse.model_validate(result.get("material"))


@router.post("/{course_id}/submit", response_model=CourseResponse)
def submit_for_approval(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
):
    """Draft/Rejected -> PendingApproval."""
    result = raise_for_result(course_service.submit_for_approval(db, course_id, current_user.id))
    return course_to_response(result.get("course"))


@router.post("/{course_id}/enroll", response_model=EnrollmentResponse, status_code=201)
def enroll(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Enroll the current user in an approved course."""
    result = raise_for_result(enrollment_service.enroll(db, current_user.id, course_id))
    return enrollment_to_response(result.get("enrollment"))


@router.get("/{course_id}/reviews", response_model=list[ReviewResponse])
def list_reviews(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Public (non-flagged) reviews."""
    return [review_to_response(r) for r in review_service.get_course_reviews(db, course_id)]


@router.post("/{course_id}/reviews", response_model=ReviewSubmitResponse, status_code=201)
def submit_review(
    course_id: str,
    req: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = raise_for_result(review_service.submit_review(
        db,
        student_id=current_user.id,
        student_name=current_user.full_name,
        course_id=course_id,
        rating=req.rating,
        comment=req.comment,
    ))
    return ReviewSubmitResponse(message=result.message, review=review_to_response(result.get("review")))
