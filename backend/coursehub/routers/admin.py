"""Admin router — user management, course approval, review moderation and analytics."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from coursehub.database import get_db
from coursehub.middleware.auth import require_admin
from coursehub.models.user import User
from coursehub.routers.responses import (
    course_to_response,
    raise_for_result,
    review_to_response,
    user_to_response,
)
from coursehub.schemas.admin import (
    CourseDecision,
    CourseStats,
    PasswordReset,
    PlatformAnalytics,
    RoleChange,
    UserListResponse,
)
from coursehub.schemas.auth import UserResponse
from coursehub.schemas.course import CourseListResponse, CourseResponse, MessageResponse
from coursehub.schemas.review import ReviewResponse
from coursehub.services import analytics_service, course_service, identity_service, review_service

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ── Users ────────────────────────────────────────────────────────────────────

@router.get("/users", response_model=UserListResponse)
def list_users(
    role: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    users = identity_service.list_users(db, role=role)
    return UserListResponse(users=[UserResponse(**u) for u in users], total=len(users), role=role)


@router.patch("/users/{user_id}/role", response_model=UserResponse)
def change_role(
    user_id: str,
    req: RoleChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    result = raise_for_result(identity_service.change_role(db, user_id, req.role, actor_id=current_user.id))
    return user_to_response(result.get("user"))


@router.post("/users/{user_id}/ban", response_model=UserResponse)
def toggle_ban(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Ban or unban a user."""
    result = raise_for_result(identity_service.toggle_ban(db, user_id, actor_id=current_user.id))
    return user_to_response(result.get("user"))


@router.post("/users/{user_id}/reset-password", response_model=MessageResponse)
def reset_password(
    user_id: str,
    req: PasswordReset,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    result = raise_for_result(
        identity_service.reset_password(db, user_id, req.new_password, actor_id=current_user.id)
    )
    return MessageResponse(message=result.message)


# ── Courses ──────────────────────────────────────────────────────────────────

@router.get("/courses", response_model=CourseListResponse)
def all_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    courses = course_service.get_all_courses(db)
    return CourseListResponse(courses=[course_to_response(c) for c in courses], total=len(courses))


@router.get("/courses/pending", response_model=CourseListResponse)
def pending_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    courses = course_service.get_pending_courses(db)
    return CourseListResponse(courses=[course_to_response(c) for c in courses], total=len(courses))


@router.patch("/courses/{course_id}/review", response_model=CourseResponse)
def review_course(
    course_id: str,
    req: CourseDecision,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Approve or reject a course, whatever its current status."""
    result = raise_for_result(
        course_service.review_course(db, course_id, req.approve, actor_id=current_user.id)
    )
    return course_to_response(result.get("course"))


@router.get("/courses/{course_id}/stats", response_model=CourseStats)
def course_stats(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    stats = analytics_service.get_course_stats(db, course_id)
    if not stats:
        raise HTTPException(status_code=404, detail="Course not found")
    return CourseStats(**stats)


# ── Reviews ──────────────────────────────────────────────────────────────────

@router.get("/reviews/flagged", response_model=list[ReviewResponse])
def flagged_reviews(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return [review_to_response(r) for r in review_service.get_flagged_reviews(db)]


@router.post("/reviews/{review_id}/approve", response_model=MessageResponse)
def approve_review(
    review_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    result = raise_for_result(review_service.approve_review(db, review_id, actor_id=current_user.id))
    return MessageResponse(message=result.message)


@router.delete("/reviews/{review_id}", response_model=MessageResponse)
def delete_review(
    review_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    result = raise_for_result(review_service.delete_review(db, review_id, actor_id=current_user.id))
    return MessageResponse(message=result.message)


# ── Analytics ────────────────────────────────────────────────────────────────

@router.get("/analytics", response_model=PlatformAnalytics)
def platform_analytics(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return PlatformAnalytics(**analytics_service.get_platform_analytics(db))
