"""Review request/response schemas."""

from pydantic import BaseModel


class ReviewCreate(BaseModel):
    rating: float
    comment: str


class ReviewResponse(BaseModel):
    id: str
    student_id: str
    student_name: str
    course_id: str
    rating: int
    comment: str
    is_verified: bool
    is_flagged: bool
    created_at: str


class ReviewSubmitResponse(BaseModel):
    message: str
    review: ReviewResponse
