"""Tests for review gating, spam flagging, moderation and rating aggregation."""

from datetime import datetime, timedelta, timezone

import pytest

from coursehub.errors import ErrorKind
from coursehub.models.review import Review
from coursehub.services import enrollment_service, review_service
from coursehub.services.moderation import check_content

GOOD_COMMENT = "Great course!"  # 13 characters


@pytest.fixture
def enrolled(db, make_course, student):
    """An approved 2-lesson course with the student at 50% progress."""
    course = make_course(lessons=2)
    enrollment_service.enroll(db, student.id, course.id)
    enrollment_service.complete_lesson(db, student.id, course.id, course.lessons[0].id)
    return course


@pytest.fixture
def make_reviewer(db, make_user):
    """A new student enrolled in the course with one lesson done."""

    def _make(course):
        user = make_user("Student")
        enrollment_service.enroll(db, user.id, course.id)
        enrollment_service.complete_lesson(db, user.id, course.id, course.lessons[0].id)
        return user

    return _make


def _submit(db, user, course, rating=4, comment=GOOD_COMMENT, now=None):
    return review_service.submit_review(db, user.id, user.full_name, course.id, rating, comment, now=now)


class TestModeration:
    """Spam heuristics."""

    @pytest.mark.parametrize("text", [
        "Click HERE to buy now",
        "see https://spam.example for more",
        "visit www.spam.example",
        "FREE MONEY inside",
    ])
    def test_spam_detected(self, text):
        outcome = check_content(text)
        assert outcome["spam"]
        assert outcome["reason"]

    def test_clean_text(self):
        assert check_content("A thoughtful, well paced course.") == {"spam": False, "reason": None}


class TestSubmitGates:
    """Checks run in order and stop at the first failure."""

    def test_not_enrolled(self, db, make_course, student):
        course = make_course()
        result = _submit(db, student, course)
        assert result.error == ErrorKind.not_found

    def test_insufficient_progress(self, db, make_course, student):
        course = make_course(lessons=20)
        enrollment_service.enroll(db, student.id, course.id)
        enrollment_service.complete_lesson(db, student.id, course.id, course.lessons[0].id)  # 5%
        result = _submit(db, student, course)
        assert result.error == ErrorKind.precondition

    def test_progress_checked_before_validation(self, db, make_course, student):
        course = make_course(lessons=2)
        enrollment_service.enroll(db, student.id, course.id)
        result = _submit(db, student, course, rating=9, comment="short")
        assert result.error == ErrorKind.precondition

    def test_duplicate_review(self, db, enrolled, student):
        assert _submit(db, student, enrolled).success
        result = _submit(db, student, enrolled, rating=1)
        assert result.error == ErrorKind.conflict
        assert db.query(Review).count() == 1

    @pytest.mark.parametrize("rating", [0, 6, -1, 5.5, "4", None, True, float("nan"), float("inf"), float("-inf")])
    def test_bad_rating(self, db, enrolled, student, rating):
        result = _submit(db, student, enrolled, rating=rating)
        assert result.error == ErrorKind.validation

    def test_short_comment(self, db, enrolled, student):
        result = _submit(db, student, enrolled, comment="Too short")
        assert result.error == ErrorKind.validation

    def test_exactly_minimum_length_accepted(self, db, enrolled, student):
        assert _submit(db, student, enrolled, comment="0123456789").success

    def test_verified_and_rating_rounded(self, db, enrolled, student):
        result = _submit(db, student, enrolled, rating=4.5)
        review = result.get("review")
        assert review.is_verified
        assert review.rating == 5


class TestRateLimit:
    """At most three reviews per student in any trailing hour."""

    def _courses(self, make_course, n):
        return [make_course(lessons=1, title=f"Course {i}") for i in range(n)]

    def _enroll_all(self, db, student, courses):
        for course in courses:
            enrollment_service.enroll(db, student.id, course.id)
            enrollment_service.complete_lesson(db, student.id, course.id, course.lessons[0].id)

    def test_fourth_review_within_hour_throttled(self, db, make_course, student):
        courses = self._courses(make_course, 4)
        self._enroll_all(db, student, courses)
        for course in courses[:3]:
            assert _submit(db, student, course).success
        result = _submit(db, student, courses[3])
        assert result.error == ErrorKind.rate_limit
        assert db.query(Review).count() == 3

    def test_window_slides(self, db, make_course, student):
        courses = self._courses(make_course, 5)
        self._enroll_all(db, student, courses)
        now = datetime.now(timezone.utc)

        assert _submit(db, student, courses[0], now=now - timedelta(minutes=90)).success
        assert _submit(db, student, courses[1], now=now - timedelta(minutes=50)).success
        assert _submit(db, student, courses[2], now=now - timedelta(minutes=10)).success

        # the 90-minute-old review has left the window
        assert _submit(db, student, courses[3], now=now).success
        assert _submit(db, student, courses[4], now=now).error == ErrorKind.rate_limit

    def test_flagged_reviews_count_toward_limit(self, db, make_course, student):
        courses = self._courses(make_course, 4)
        self._enroll_all(db, student, courses)
        for course in courses[:3]:
            assert _submit(db, student, course, comment="click here to buy now").success
        assert _submit(db, student, courses[3]).error == ErrorKind.rate_limit


class TestRatingConsistency:
    """average_rating always equals the mean of non-flagged ratings."""

    def test_first_review_sets_rating(self, db, enrolled, student):
        result = _submit(db, student, enrolled, rating=4, comment="Twelve chars")
        assert result.success
        db.refresh(enrolled)
        assert enrolled.average_rating == 4.0
        assert enrolled.total_ratings == 1

    def test_mean_rounded_to_two_decimals(self, db, enrolled, make_reviewer):
        for rating in (5, 4, 4):
            assert _submit(db, make_reviewer(enrolled), enrolled, rating=rating).success
        db.refresh(enrolled)
        assert enrolled.average_rating == 4.33
        assert enrolled.total_ratings == 3

    def test_flagged_review_excluded_until_approved(self, db, enrolled, student, make_reviewer):
        assert _submit(db, make_reviewer(enrolled), enrolled, rating=2).success

        result = _submit(db, student, enrolled, rating=5, comment="click here to buy now")
        assert result.success
        review = result.get("review")
        assert review.is_flagged
        db.refresh(enrolled)
        assert enrolled.average_rating == 2.0
        assert enrolled.total_ratings == 1
        assert review.id not in [r.id for r in review_service.get_course_reviews(db, enrolled.id)]
        assert review.id in [r.id for r in review_service.get_flagged_reviews(db)]

        assert review_service.approve_review(db, review.id).success
        db.refresh(enrolled)
        assert enrolled.average_rating == 3.5
        assert enrolled.total_ratings == 2
        assert review_service.get_flagged_reviews(db) == []

    def test_delete_recomputes_to_zero(self, db, enrolled, student):
        review = _submit(db, student, enrolled, rating=3).get("review")
        assert review_service.delete_review(db, review.id).success
        db.refresh(enrolled)
        assert enrolled.average_rating == 0.0
        assert enrolled.total_ratings == 0

    def test_deleting_flagged_review_leaves_rating(self, db, enrolled, student, make_reviewer):
        _submit(db, make_reviewer(enrolled), enrolled, rating=4)
        flagged = _submit(db, student, enrolled, rating=1, comment="earn cash fast today").get("review")
        assert review_service.delete_review(db, flagged.id).success
        db.refresh(enrolled)
        assert enrolled.average_rating == 4.0
        assert enrolled.total_ratings == 1

    def test_approve_clean_review_is_harmless(self, db, enrolled, student):
        review = _submit(db, student, enrolled, rating=4).get("review")
        assert review_service.approve_review(db, review.id).success
        db.refresh(enrolled)
        assert enrolled.average_rating == 4.0

    def test_unknown_review_ids(self, db):
        assert review_service.approve_review(db, "missing").error == ErrorKind.not_found
        assert review_service.delete_review(db, "missing").error == ErrorKind.not_found
