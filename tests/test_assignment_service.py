import uuid

import pytest

from app.exceptions import BusinessRuleViolation, NotFoundError, ValidationError
from app.models import ContentProgress
from app.services.assignment_service import assignment_service

FILES = [{"file_name": "report.pdf", "file_url": "https://files.example.edu/report.pdf", "file_size": 2048}]


@pytest.fixture
def session(make_session, subject):
    return make_session(subject)


@pytest.fixture
def make_assignment(make_block, session):
    def _make(**content_data):
        return make_block(session, type="assignment", content_data=content_data or None)
    return _make


def test_submit_text(db, make_assignment):
    block = make_assignment(submissionFormat="text", maxPoints=20)

    submission = assignment_service.submit(db, block.id, uuid.uuid4(), submission_text="My essay")

    assert submission.status == "submitted"
    assert float(submission.max_score) == 20
    assert submission.submission_files is None


def test_default_max_score(db, make_assignment):
    submission = assignment_service.submit(db, make_assignment().id, uuid.uuid4(), submission_files=FILES)

    assert float(submission.max_score) == 100
    assert submission.submission_files[0]["file_name"] == "report.pdf"
    assert "uploaded_at" in submission.submission_files[0]


def test_file_format_requires_files(db, make_assignment):
    block = make_assignment(submissionFormat="file")

    with pytest.raises(ValidationError):
        assignment_service.submit(db, block.id, uuid.uuid4(), submission_text="text only")


def test_empty_submission(db, make_assignment):
    with pytest.raises(ValidationError):
        assignment_service.submit(db, make_assignment().id, uuid.uuid4(), submission_text="   ")


def test_resubmission_is_rejected(db, make_assignment):
    block = make_assignment()
    user_id = uuid.uuid4()
    assignment_service.submit(db, block.id, user_id, submission_text="first")

    with pytest.raises(BusinessRuleViolation):
        assignment_service.submit(db, block.id, user_id, submission_text="second")


def test_submit_to_non_assignment(db, make_block, session):
    quiz = make_block(session, type="quiz")

    with pytest.raises(ValidationError):
        assignment_service.submit(db, quiz.id, uuid.uuid4(), submission_text="answer")


def test_submit_to_missing_block(db):
    with pytest.raises(NotFoundError):
        assignment_service.submit(db, uuid.uuid4(), uuid.uuid4(), submission_text="answer")


def test_passing_grade_completes_block(db, make_assignment):
    block = make_assignment(maxPoints=20)
    user_id = uuid.uuid4()
    submission = assignment_service.submit(db, block.id, user_id, submission_text="work")

    graded = assignment_service.grade(db, submission.id, uuid.uuid4(), 12, feedback="Solid")

    assert graded.status == "graded"
    assert graded.is_passed is True
    assert float(graded.percentage) == 60
    progress = db.query(ContentProgress).filter_by(user_id=user_id, content_block_id=block.id).one()
    assert progress.is_completed is True
    assert progress.completion_data == {"assignmentPassed": True}


def test_failing_grade_leaves_progress_untouched(db, make_assignment):
    block = make_assignment()
    user_id = uuid.uuid4()
    submission = assignment_service.submit(db, block.id, user_id, submission_text="work")

    graded = assignment_service.grade(db, submission.id, uuid.uuid4(), 49.5)

    assert graded.is_passed is False
    assert db.query(ContentProgress).filter_by(user_id=user_id).count() == 0


def test_grade_keeps_existing_time_spent(db, make_assignment):
    from app.services.progress_service import progress_service

    block = make_assignment()
    user_id = uuid.uuid4()
    progress_service.upsert_progress(db, block.id, user_id, is_completed=False, time_spent=300)
    submission = assignment_service.submit(db, block.id, user_id, submission_text="work")

    assignment_service.grade(db, submission.id, uuid.uuid4(), 80)

    progress = db.query(ContentProgress).filter_by(user_id=user_id).one()
    assert progress.is_completed is True
    assert progress.time_spent == 300


def test_cannot_regrade(db, make_assignment):
    submission = assignment_service.submit(db, make_assignment().id, uuid.uuid4(), submission_text="work")
    assignment_service.grade(db, submission.id, uuid.uuid4(), 70)

    with pytest.raises(BusinessRuleViolation):
        assignment_service.grade(db, submission.id, uuid.uuid4(), 90)


@pytest.mark.parametrize("score", [-1, 101])
def test_score_out_of_range(db, make_assignment, score):
    submission = assignment_service.submit(db, make_assignment().id, uuid.uuid4(), submission_text="work")

    with pytest.raises(BusinessRuleViolation):
        assignment_service.grade(db, submission.id, uuid.uuid4(), score)


def test_grade_missing_submission(db):
    with pytest.raises(NotFoundError):
        assignment_service.grade(db, uuid.uuid4(), uuid.uuid4(), 10)


def test_explicit_zero_threshold_is_respected(db, make_assignment):
    from app.services.assignment_service import AssignmentService

    service = AssignmentService(passing_percentage=0)
    submission = service.submit(db, make_assignment().id, uuid.uuid4(), submission_text="work")

    graded = service.grade(db, submission.id, uuid.uuid4(), 0)

    assert graded.is_passed is True
