"""Tests for the course catalog and approval state machine."""

import pytest

from coursehub.errors import ErrorKind
from coursehub.models.audit_log import AuditLog
from coursehub.models.course import Course, CourseStatus
from coursehub.models.lesson import Lesson
from coursehub.services import course_service


class TestCreateCourse:
    """Validation on course creation."""

    def test_new_course_starts_as_draft_with_zero_aggregates(self, db, instructor):
        result = course_service.create_course(db, "Intro to X", "desc", 10.0, "Programming", instructor.id)
        assert result.success
        course = result.get("course")
        assert course.status == CourseStatus.draft.value
        assert course.total_enrollments == 0
        assert course.average_rating == 0.0
        assert course.total_ratings == 0
        assert course.instructor_name == "Ada Lovelace"

    @pytest.mark.parametrize("title,price,category", [
        ("ab", 10.0, "Programming"),
        ("", 10.0, "Programming"),
        ("Valid title", -1.0, "Programming"),
        ("Valid title", 10.0, "Cooking"),
        ("Valid title", float("nan"), "Programming"),
        ("Valid title", float("inf"), "Programming"),
        ("Valid title", "abc", "Programming"),
        ("Valid title", None, "Programming"),
    ])
    def test_invalid_input_rejected(self, db, instructor, title, price, category):
        result = course_service.create_course(db, title, "desc", price, category, instructor.id)
        assert not result.success
        assert result.error == ErrorKind.validation
        assert db.query(Course).count() == 0

    def test_free_course_allowed(self, db, instructor):
        result = course_service.create_course(db, "Free stuff", None, 0, "Other", instructor.id)
        assert result.success

    def test_categories_are_fixed(self):
        categories = course_service.get_categories()
        assert "Health & Fitness" in categories
        assert len(categories) == 9


class TestLessons:
    """Lesson ordering stays dense 1..N."""

    def test_lessons_appended_in_order(self, db, make_course):
        course = make_course(lessons=3, approve=False)
        assert [l.order for l in course.lessons] == [1, 2, 3]

    def test_remove_lesson_resequences(self, db, make_course):
        course = make_course(lessons=3, approve=False)
        middle_id = course.lessons[1].id
        result = course_service.remove_lesson(db, course.id, middle_id)
        assert result.success
        db.refresh(course)
        assert [l.order for l in course.lessons] == [1, 2]
        assert [l.title for l in course.lessons] == ["Lesson 1", "Lesson 3"]
        assert db.query(Lesson).filter(Lesson.id == middle_id).first() is None

    def test_remove_unknown_lesson_not_found(self, db, make_course):
        course = make_course(lessons=1, approve=False)
        result = course_service.remove_lesson(db, course.id, "nope")
        assert result.error == ErrorKind.not_found

    def test_add_lesson_by_other_instructor_refused(self, db, make_course, make_user):
        course = make_course(lessons=1, approve=False)
        other = make_user("Instructor")
        result = course_service.add_lesson(db, course.id, "Sneaky", requester_id=other.id)
        assert result.error == ErrorKind.authorization


class TestMaterials:
    """Material type enumeration."""

    @pytest.mark.parametrize("material_type", ["video", "text", "quiz"])
    def test_valid_types(self, db, make_course, material_type):
        course = make_course(lessons=0, approve=False)
        result = course_service.add_material(db, course.id, material_type, "Material")
        assert result.success

    def test_invalid_type(self, db, make_course):
        course = make_course(lessons=0, approve=False)
        result = course_service.add_material(db, course.id, "podcast", "Material")
        assert result.error == ErrorKind.validation

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_title_required(self, db, make_course, title):
        course = make_course(lessons=0, approve=False)
        result = course_service.add_material(db, course.id, "text", title)
        assert result.error == ErrorKind.validation
        db.refresh(course)
        assert course.materials == []


class TestSubmitForApproval:
    """Guards on Draft/Rejected -> PendingApproval."""

    def test_zero_lessons_always_fails(self, db, make_course, instructor):
        course = make_course(lessons=0, approve=False)
        result = course_service.submit_for_approval(db, course.id, instructor.id)
        assert result.error == ErrorKind.precondition
        db.refresh(course)
        assert course.status == CourseStatus.draft.value

    def test_non_owner_refused(self, db, make_course, make_user):
        course = make_course(lessons=1, approve=False)
        other = make_user("Instructor")
        result = course_service.submit_for_approval(db, course.id, other.id)
        assert result.error == ErrorKind.authorization

    def test_submit_moves_to_pending(self, db, make_course, instructor):
        course = make_course(lessons=1, approve=False)
        result = course_service.submit_for_approval(db, course.id, instructor.id)
        assert result.success
        db.refresh(course)
        assert course.status == CourseStatus.pending_approval.value
        assert course in course_service.get_pending_courses(db)

    def test_cannot_resubmit_pending_or_approved(self, db, make_course, instructor):
        course = make_course(lessons=1, approve=False)
        course_service.submit_for_approval(db, course.id, instructor.id)
        result = course_service.submit_for_approval(db, course.id, instructor.id)
        assert result.error == ErrorKind.invalid_state

        course_service.review_course(db, course.id, approve=True)
        result = course_service.submit_for_approval(db, course.id, instructor.id)
        assert result.error == ErrorKind.invalid_state

    def test_rejected_course_can_be_resubmitted(self, db, make_course, instructor):
        course = make_course(lessons=1, approve=False)
        course_service.submit_for_approval(db, course.id, instructor.id)
        course_service.review_course(db, course.id, approve=False)
        db.refresh(course)
        assert course.status == CourseStatus.rejected.value

        result = course_service.submit_for_approval(db, course.id, instructor.id)
        assert result.success
        db.refresh(course)
        assert course.status == CourseStatus.pending_approval.value


class TestReviewCourse:
    """Admin judgement has no status guard."""

    def test_draft_can_be_approved_directly(self, db, make_course):
        course = make_course(lessons=0, approve=False)
        result = course_service.review_course(db, course.id, approve=True)
        assert result.success
        db.refresh(course)
        assert course.status == CourseStatus.approved.value

    def test_approved_can_be_rejudged(self, db, make_course, admin):
        course = make_course(lessons=1)
        result = course_service.review_course(db, course.id, approve=False, actor_id=admin.id)
        assert result.success
        db.refresh(course)
        assert course.status == CourseStatus.rejected.value

    def test_transitions_are_audited(self, db, make_course, admin):
        course = make_course(lessons=1, approve=False)
        course_service.review_course(db, course.id, approve=True, actor_id=admin.id)
        actions = [a.action for a in db.query(AuditLog).filter(AuditLog.entity_id == course.id).all()]
        assert "approved" in actions

    def test_unknown_course(self, db):
        result = course_service.review_course(db, "missing", approve=True)
        assert result.error == ErrorKind.not_found


class TestEditAndDelete:
    """Partial edits and deletion rights."""

    def test_edit_touches_only_given_fields(self, db, make_course):
        course = make_course(lessons=1)
        result = course_service.edit_course(db, course.id, {"price": 49.0})
        assert result.success
        db.refresh(course)
        assert course.price == 49.0
        assert course.title == "Intro to X"
        assert course.status == CourseStatus.approved.value

    def test_edit_validates_fields(self, db, make_course):
        course = make_course(lessons=1)
        assert course_service.edit_course(db, course.id, {"price": float("nan")}).error == ErrorKind.validation
        assert course_service.edit_course(db, course.id, {"category": "Cooking"}).error == ErrorKind.validation
        assert course_service.edit_course(db, course.id, {"title": "x"}).error == ErrorKind.validation

    def test_edit_cannot_write_aggregates(self, db, make_course):
        course = make_course(lessons=1)
        result = course_service.edit_course(db, course.id, {"average_rating": 5.0})
        assert result.error == ErrorKind.validation
        db.refresh(course)
        assert course.average_rating == 0.0

    def test_owner_can_delete_any_status(self, db, make_course, instructor):
        course = make_course(lessons=1)
        result = course_service.delete_course(db, course.id, instructor.id)
        assert result.success
        assert course_service.get_course(db, course.id) is None

    def test_stranger_cannot_delete(self, db, make_course, make_user):
        course = make_course(lessons=1)
        other = make_user("Instructor")
        result = course_service.delete_course(db, course.id, other.id)
        assert result.error == ErrorKind.authorization
        assert course_service.get_course(db, course.id) is not None

    def test_admin_can_delete(self, db, make_course, admin):
        course = make_course(lessons=1)
        result = course_service.delete_course(db, course.id, admin.id, is_admin=True)
        assert result.success


class TestPreview:
    """Only free-preview lessons are exposed in the preview."""

    def test_preview_lists_free_lessons(self, db, make_course):
        course = make_course(lessons=2, approve=False)
        course_service.add_lesson(db, course.id, "Teaser", is_free_preview=True)
        preview = course_service.get_course_preview(db, course.id)
        assert preview["total_lessons"] == 3
        assert [l.title for l in preview["preview_lessons"]] == ["Teaser"]

    def test_missing_course(self, db):
        assert course_service.get_course_preview(db, "missing") is None


class TestListings:
    """Status- and owner-scoped course lists."""

    def test_approved_and_instructor_lists(self, db, make_course, make_user):
        live = make_course(lessons=1, title="Live Course")
        draft = make_course(lessons=1, approve=False, title="Draft Course")
        other = make_course(lessons=1, title="Other Course", owner=make_user("Instructor"))

        approved_ids = {c.id for c in course_service.get_approved_courses(db)}
        assert approved_ids == {live.id, other.id}

        mine = {c.id for c in course_service.get_instructor_courses(db, live.instructor_id)}
        assert mine == {live.id, draft.id}
        assert len(course_service.get_all_courses(db)) == 3
