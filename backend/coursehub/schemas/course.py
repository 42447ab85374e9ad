"""Course, lesson and material request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class CourseCreate(BaseModel):
    title: str
    description: Optional[str] = None
    price: float = 0.0
    category: str


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None


class LessonCreate(BaseModel):
    title: str
    content: Optional[str] = None
    duration: int = 0  # minutes
    video_url: str = ""
    is_free_preview: bool = False


class MaterialCreate(BaseModel):
    material_type: str  # video | text | quiz
    title: str
    content: Optional[str] = None


class LessonResponse(BaseModel):
    id: str
    course_id: str
    title: str
    content: Optional[str]
    duration: int
    video_url: str
    order: int
    is_free_preview: bool

    class Config:
        from_attributes = True


class MaterialResponse(BaseModel):
    id: str
    course_id: str
    material_type: str
    title: str
    content: Optional[str]

    class Config:
        from_attributes = True


class CourseResponse(BaseModel):
    id: str
    instructor_id: str
    instructor_name: str
    title: str
    description: Optional[str]
    price: float
    category: str
    status: str
    total_enrollments: int
    average_rating: float
    total_ratings: int
    lessons_count: int = 0
    created_at: str


class CourseDetailResponse(CourseResponse):
    lessons: list[LessonResponse] = []
    materials: list[MaterialResponse] = []


class CoursePreviewResponse(CourseResponse):
    preview_lessons: list[LessonResponse] = []
    total_lessons: int


class CourseListResponse(BaseModel):
    courses: list[CourseResponse]
    total: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str
