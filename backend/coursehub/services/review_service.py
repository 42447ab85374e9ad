"""Review service — gated submission, spam flagging, moderation and course ratings.

Submission checks run in a fixed order and stop at the first failure:
enrollment, minimum progress, duplicate, input validation, rate limit.
Spam does not block: a flagged review is stored but ignored by the course
rating and the public listing until an admin approves it.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from numbers import Real
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from coursehub.config import settings
from coursehub.errors import ConflictError, NotFoundError, PreconditionError, RateLimitError, ValidationError
from coursehub.models.course import Course
from coursehub.models.review import Review
from coursehub.rounding import round_half_up
from coursehub.services import audit
from coursehub.services.enrollment_service import get_enrollment
from coursehub.services.moderation import check_content
from coursehub.services.result import OperationResult, service_operation

logger = logging.getLogger(__name__)


def _recalculate_course_rating(db: Session, course_id: str) -> None:
    """The only writer of Course.average_rating / total_ratings.

    Mean of all non-flagged ratings rounded to 2 decimals, or 0/0 when none.
    Caller must have flushed pending review changes.
    """
    course = db.query(Course).filter(Course.id == course_id).with_for_update().first()
    if not course:
        return

    ratings = [
        r for (r,) in db.query(Review.rating)
        .filter(Review.course_id == course_id, Review.is_flagged.is_(False))
        .all()
    ]
    if not ratings:
        course.average_rating = 0.0
        course.total_ratings = 0
    else:
        course.average_rating = round_half_up(sum(ratings) / len(ratings), 2)
        course.total_ratings = len(ratings)


def _validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, Real) or not math.isfinite(rating):
        raise ValidationError("Rating must be a number between 1 and 5.")
    if rating < 1 or rating > 5:
        raise ValidationError("Rating must be between 1 and 5.")
    return max(1, min(5, int(round_half_up(rating))))


def _check_rate_limit(db: Session, student_id: str, now: datetime) -> None:
    """Sliding window over the student's own review timestamps, any course."""
    since = now - timedelta(minutes=settings.REVIEW_RATE_WINDOW_MINUTES)
    recent = (
        db.query(func.count(Review.id))
        .filter(Review.student_id == student_id, Review.created_at > since)
        .scalar()
    )
    if recent >= settings.MAX_REVIEWS_PER_HOUR:
        raise RateLimitError("You are submitting reviews too quickly. Please wait a while.")


@service_operation
def submit_review(
    db: Session,
    student_id: str,
    student_name: str,
    course_id: str,
    rating,
    comment: str,
    now: Optional[datetime] = None,
) -> OperationResult:
    """Submit a review; recompute the course rating unless it was flagged."""
    now = now or datetime.now(timezone.utc)

    enrollment = get_enrollment(db, student_id, course_id)
    if not enrollment:
        raise NotFoundError("You must be enrolled in this course to leave a review.")
    if enrollment.progress_percent < settings.MIN_REVIEW_PROGRESS_PCT:
        raise PreconditionError(
            f"Complete at least {settings.MIN_REVIEW_PROGRESS_PCT}% of the course before reviewing."
        )
    existing = (
        db.query(Review)
        .filter(Review.student_id == student_id, Review.course_id == course_id)
        .first()
    )
    if existing:
        raise ConflictError("You have already reviewed this course.")
    stored_rating = _validate_rating(rating)
    if not comment or len(comment) < settings.MIN_REVIEW_LENGTH:
        raise ValidationError(f"Review must be at least {settings.MIN_REVIEW_LENGTH} characters long.")
    _check_rate_limit(db, student_id, now)

    course = db.query(Course).filter(Course.id == course_id).with_for_update().first()
    if not course:
        raise NotFoundError("Course not found.")

    moderation = check_content(comment)
    review = Review(
        student_id=student_id,
        student_name=student_name or "",
        course_id=course_id,
        rating=stored_rating,
        comment=comment,
        is_verified=True,
        is_flagged=moderation["spam"],
        created_at=now,
    )
    db.add(review)
    db.flush()

    if review.is_flagged:
        db.commit()
        logger.info("Review %s on course %s flagged: %s", review.id, course_id, moderation["reason"])
        return OperationResult.ok(
            "Review submitted (pending moderation due to content check).",
            review=review,
        )

    _recalculate_course_rating(db, course_id)
    db.commit()
    db.refresh(review)
    return OperationResult.ok("Review submitted successfully!", review=review)


def get_course_reviews(db: Session, course_id: str) -> list[Review]:
    """Public listing: non-flagged reviews, newest first."""
    return (
        db.query(Review)
        .filter(Review.course_id == course_id, Review.is_flagged.is_(False))
        .order_by(Review.created_at.desc())
        .all()
    )


def get_flagged_reviews(db: Session) -> list[Review]:
    return (
        db.query(Review)
        .filter(Review.is_flagged.is_(True))
        .order_by(Review.created_at.asc())
        .all()
    )


def _require_review(db: Session, review_id: str) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFoundError("Review not found.")
    return review


@service_operation
def approve_review(db: Session, review_id: str, actor_id: Optional[str] = None) -> OperationResult:
    """Admin: clear the spam flag so the review counts toward the rating."""
    review = _require_review(db, review_id)
    was_flagged = review.is_flagged
    review.is_flagged = False
    audit.record(db, "review", review.id, "approved", actor_id,
                 old_data={"is_flagged": was_flagged}, new_data={"is_flagged": False})
    db.flush()
    _recalculate_course_rating(db, review.course_id)
    db.commit()
    logger.info("Review %s approved", review.id)
    return OperationResult.ok("Review approved.", review=review)


@service_operation
def delete_review(db: Session, review_id: str, actor_id: Optional[str] = None) -> OperationResult:
    """Admin: remove a review and recompute its course's rating."""
    review = _require_review(db, review_id)
    course_id = review.course_id
    audit.record(db, "review", review.id, "deleted", actor_id,
                 old_data={"course_id": course_id, "rating": review.rating, "is_flagged": review.is_flagged})
    db.delete(review)
    db.flush()
    _recalculate_course_rating(db, course_id)
    db.commit()
    logger.info("Review %s deleted", review_id)
    return OperationResult.ok("Review deleted.")
