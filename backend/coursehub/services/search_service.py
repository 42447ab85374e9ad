"""Search service — filtered catalog search and simple recommendations."""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from coursehub.config import settings
from coursehub.models.course import Course, CourseStatus
from coursehub.models.enrollment import Enrollment

SORT_OPTIONS = {
    "popularity": (Course.total_enrollments.desc(),),
    "newest": (Course.created_at.desc(),),
    "highest-rated": (Course.average_rating.desc(),),
    "price-low": (Course.price.asc(),),
    "price-high": (Course.price.desc(),),
}


def search_courses(
    db: Session,
    query: Optional[str] = None,
    category: Optional[str] = None,
    min_rating: Optional[float] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    sort_by: str = "popularity",
) -> list[Course]:
    """Search approved courses by keyword (title, description, instructor) and filters."""
    q = db.query(Course).filter(Course.status == CourseStatus.approved.value)
    if query:
        pattern = f"%{query.lower()}%"
        q = q.filter(or_(
            Course.title.ilike(pattern),
            Course.description.ilike(pattern),
            Course.instructor_name.ilike(pattern),
        ))
    if category:
        q = q.filter(Course.category == category)
    if min_rating:
        q = q.filter(Course.average_rating >= min_rating)
    if min_price is not None:
        q = q.filter(Course.price >= min_price)
    if max_price is not None:
        q = q.filter(Course.price <= max_price)

    order = SORT_OPTIONS.get(sort_by, SORT_OPTIONS["popularity"])
    return q.order_by(*order).all()


def _rank_key(course: Course):
    return (-course.average_rating, -course.total_enrollments)


def get_recommendations(db: Session, student_id: str, limit: Optional[int] = None) -> list[Course]:
    """Recommend approved courses the student is not enrolled in.

    Courses in the student's most-enrolled categories come first, then the
    rest; within each group, highest rated then most popular.
    """
    limit = limit or settings.RECOMMENDATION_LIMIT
    enrollments = db.query(Enrollment).filter(Enrollment.student_id == student_id).all()
    enrolled_ids = {e.course_id for e in enrollments}

    category_counts: dict[str, int] = {}
    if enrolled_ids:
        for course in db.query(Course).filter(Course.id.in_(enrolled_ids)).all():
            category_counts[course.category] = category_counts.get(course.category, 0) + 1

    candidates = [
        c for c in db.query(Course).filter(Course.status == CourseStatus.approved.value).all()
        if c.id not in enrolled_ids
    ]
    if not category_counts:
        return sorted(candidates, key=lambda c: (-c.total_enrollments, -c.average_rating))[:limit]

    preferred = sorted((c for c in candidates if c.category in category_counts), key=_rank_key)
    others = sorted((c for c in candidates if c.category not in category_counts), key=_rank_key)
    return (preferred + others)[:limit]
