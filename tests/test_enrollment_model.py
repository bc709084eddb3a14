import uuid

import pytest

from app.exceptions import BusinessRuleViolation, ValidationError
from app.models import Enrollment


def new_enrollment(**overrides):
    fields = dict(
        student_id=uuid.uuid4(),
        subject_id=uuid.uuid4(),
        semester_number=3,
        academic_year_id=uuid.uuid4(),
    )
    fields.update(overrides)
    return Enrollment.create(**fields)


def test_create_starts_active_at_zero():
    enrollment = new_enrollment()

    assert enrollment.is_active()
    assert enrollment.progress_percentage == 0
    assert enrollment.enrollment_date is not None


@pytest.mark.parametrize("semester", [0, 11])
def test_create_rejects_semester_out_of_range(semester):
    with pytest.raises(ValidationError):
        new_enrollment(semester_number=semester)


def test_create_requires_student():
    with pytest.raises(ValidationError):
        new_enrollment(student_id=None)


def test_reaching_100_completes():
    enrollment = new_enrollment()

    enrollment.update_progress(100)

    assert enrollment.is_completed()
    assert enrollment.completed_at is not None


def test_completed_stays_at_100():
    enrollment = new_enrollment()
    enrollment.update_progress(100)
    completed_at = enrollment.completed_at

    enrollment.update_progress(40)

    assert enrollment.progress_percentage == 100
    assert enrollment.completed_at == completed_at


@pytest.mark.parametrize("value, expected", [(-5, 0), (66.5, 67), (42.4, 42), (None, 0)])
def test_progress_is_clamped_and_rounded(value, expected):
    enrollment = new_enrollment()

    enrollment.update_progress(value)

    assert enrollment.progress_percentage == expected
    assert enrollment.is_active()


def test_over_100_is_clamped_and_completes():
    enrollment = new_enrollment()

    enrollment.update_progress(150)

    assert enrollment.progress_percentage == 100
    assert enrollment.is_completed()


def test_cannot_complete_twice():
    enrollment = new_enrollment()
    enrollment.complete()

    with pytest.raises(BusinessRuleViolation):
        enrollment.complete()


def test_cannot_drop_completed():
    enrollment = new_enrollment()
    enrollment.complete()

    with pytest.raises(BusinessRuleViolation):
        enrollment.drop()


def test_dropped_enrollment_does_not_complete():
    enrollment = new_enrollment()
    enrollment.drop()

    enrollment.update_progress(100)

    assert enrollment.status == "dropped"
    assert enrollment.completed_at is None


def test_fail():
    enrollment = new_enrollment()

    enrollment.fail()

    assert enrollment.status == "failed"
    assert not enrollment.is_active()


def test_assign_grade_leaves_status_alone():
    enrollment = new_enrollment()

    enrollment.assign_grade("A", 88, 100)

    assert enrollment.grade == "A"
    assert enrollment.is_active()


def test_assign_grade_validation():
    enrollment = new_enrollment()

    with pytest.raises(ValidationError):
        enrollment.assign_grade("")
    with pytest.raises(BusinessRuleViolation):
        enrollment.assign_grade("B", 120, 100)
