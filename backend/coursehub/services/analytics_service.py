"""Analytics service — read-only platform rollups."""

from typing import Optional

from sqlalchemy.orm import Session

from coursehub.config import settings
from coursehub.models.certificate import Certificate
from coursehub.models.course import Course, CourseStatus
from coursehub.models.enrollment import Enrollment
from coursehub.models.review import Review
from coursehub.models.user import User, UserRole
from coursehub.rounding import percent


def get_platform_analytics(db: Session) -> dict:
    """Counts, revenue, category distribution and top courses."""
    users = db.query(User).all()
    courses = db.query(Course).all()
    enrollments = db.query(Enrollment).all()
    reviews = db.query(Review).all()
    certificate_count = db.query(Certificate).count()

    # Revenue: price of the course behind each enrollment; deleted courses are skipped
    price_by_course = {c.id: c.price for c in courses}
    revenue = sum(price_by_course[e.course_id] for e in enrollments if e.course_id in price_by_course)

    category_stats: dict[str, int] = {}
    for c in courses:
        category_stats[c.category] = category_stats.get(c.category, 0) + 1

    top_courses = sorted(courses, key=lambda c: c.total_enrollments, reverse=True)[: settings.TOP_COURSES_LIMIT]

    return {
        "users": {
            "total": len(users),
            "students": sum(1 for u in users if u.role == UserRole.student.value),
            "instructors": sum(1 for u in users if u.role == UserRole.instructor.value),
            "admins": sum(1 for u in users if u.role == UserRole.admin.value),
            "banned": sum(1 for u in users if u.is_banned),
        },
        "courses": {
            "total": len(courses),
            "approved": sum(1 for c in courses if c.status == CourseStatus.approved.value),
            "pending": sum(1 for c in courses if c.status == CourseStatus.pending_approval.value),
            "draft": sum(1 for c in courses if c.status == CourseStatus.draft.value),
            "rejected": sum(1 for c in courses if c.status == CourseStatus.rejected.value),
        },
        "enrollments": {
            "total": len(enrollments),
            "completed": sum(1 for e in enrollments if e.is_completed),
            "active": sum(1 for e in enrollments if not e.is_completed and not e.is_paused),
        },
        "reviews": {
            "total": len(reviews),
            "flagged": sum(1 for r in reviews if r.is_flagged),
        },
        "certificates": certificate_count,
        "revenue": round(revenue, 2),
        "category_stats": category_stats,
        "top_courses": [
            {
                "id": c.id,
                "title": c.title,
                "enrollments": c.total_enrollments,
                "rating": c.average_rating,
            }
            for c in top_courses
        ],
    }


def get_course_stats(db: Session, course_id: str) -> Optional[dict]:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        return None
    enrollments = db.query(Enrollment).filter(Enrollment.course_id == course_id).all()
    review_count = db.query(Review).filter(Review.course_id == course_id).count()
    completed = sum(1 for e in enrollments if e.is_completed)
    return {
        "course_id": course.id,
        "title": course.title,
        "status": course.status,
        "enrollment_count": len(enrollments),
        "completion_rate": percent(completed, len(enrollments)),
        "review_count": review_count,
        "average_rating": course.average_rating,
        "total_ratings": course.total_ratings,
    }
