"""Admin request and analytics schemas."""

from typing import Optional

from pydantic import BaseModel

from coursehub.schemas.auth import UserResponse


class RoleChange(BaseModel):
    role: str  # Student | Instructor | Admin


class PasswordReset(BaseModel):
    new_password: str


class CourseDecision(BaseModel):
    approve: bool


class TopCourse(BaseModel):
    id: str
    title: str
    enrollments: int
    rating: float


class PlatformAnalytics(BaseModel):
    users: dict[str, int]
    courses: dict[str, int]
    enrollments: dict[str, int]
    reviews: dict[str, int]
    certificates: int
    revenue: float
    category_stats: dict[str, int]
    top_courses: list[TopCourse]


class CourseStats(BaseModel):
    course_id: str
    title: str
    status: str
    enrollment_count: int
    completion_rate: int
    review_count: int
    average_rating: float
    total_ratings: int


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
    role: Optional[str] = None
