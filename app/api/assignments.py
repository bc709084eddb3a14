"""
Assignment submission and grading API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from app.database import get_db
from app.exceptions import NotFoundError
from app.schemas.assignment import AssignmentSubmit, AssignmentGrade, SubmissionResponse
from app.services.assignment_service import assignment_service, serialize_submission

router = APIRouter(prefix="/api/assignments", tags=["assignments"])
logger = logging.getLogger(__name__)


@router.post("/{content_block_id}/submissions", response_model=SubmissionResponse, status_code=201)
async def submit_assignment(
    content_block_id: UUID,
    request: AssignmentSubmit,
    db: Session = Depends(get_db)
):
    """
    Submit an assignment
    
    One submission per student; resubmission is rejected.
    """
    submission = assignment_service.submit(
        db,
        content_block_id=content_block_id,
        user_id=request.user_id,
        submission_text=request.submission_text,
        submission_files=[f.model_dump() for f in request.submission_files or []],
    )
    return serialize_submission(submission)


@router.get("/{content_block_id}/submissions/{user_id}", response_model=SubmissionResponse)
async def get_submission(
    content_block_id: UUID,
    user_id: UUID,
    db: Session = Depends(get_db)
):
    submission = assignment_service.get_submission(db, content_block_id, user_id)
    if not submission:
        raise NotFoundError("Assignment submission")
    return serialize_submission(submission)


@router.put("/submissions/{submission_id}/grade", response_model=SubmissionResponse)
async def grade_submission(
    submission_id: UUID,
    request: AssignmentGrade,
    db: Session = Depends(get_db)
):
    """
    Grade a submission
    
    - Score must lie within [0, max_score]
    - Passing threshold: 50%
    - Already graded submissions cannot be re-graded
    """
    submission = assignment_service.grade(
        db,
        submission_id,
        graded_by=request.graded_by,
        score=request.score,
        max_score=request.max_score,
        feedback=request.feedback,
        rubric_scores=[r.model_dump() for r in request.rubric_scores] if request.rubric_scores else None,
    )
    return serialize_submission(submission)
