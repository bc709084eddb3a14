"""
Quiz and examination attempt API endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from app.database import get_db
from app.schemas.quiz import (
    QuizSubmission,
    QuizGradingResponse,
    AttemptHistoryResponse,
    ExaminationStatus,
)
from app.services.grading_service import grading_service, serialize_attempt


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.post("/{content_block_id}/attempts", response_model=QuizGradingResponse, status_code=201)
async def submit_attempt(
    content_block_id: UUID, submission: QuizSubmission, db: Session = Depends(get_db)
):
    """
    Submit and score a quiz or examination attempt

    - Every question is auto-graded by type
    - Passing threshold: 70%
    - Examinations accept a single attempt per user
    - A pass marks the content block complete
    """
    logger.info(f"Scoring attempt on block {content_block_id} for user {submission.user_id}")

    return grading_service.submit_quiz_attempt(
        db,
        content_block_id=content_block_id,
        user_id=submission.user_id,
        answers=submission.answers,
        time_spent_seconds=submission.time_spent_seconds,
        enrollment_id=submission.enrollment_id,
    )


@router.get("/{content_block_id}/attempts", response_model=AttemptHistoryResponse)
async def list_attempts(
    content_block_id: UUID, user_id: UUID, db: Session = Depends(get_db)
):
    """Previous attempts of a user on a block, oldest first"""
    attempts = grading_service.get_attempts(db, content_block_id, user_id)

    return AttemptHistoryResponse(
        content_block_id=content_block_id,
        user_id=user_id,
        attempts=[serialize_attempt(a) for a in attempts],
        total_attempts=len(attempts),
        best_percentage=max((a.percentage for a in attempts), default=None),
    )


@router.get("/{content_block_id}/examination-status", response_model=ExaminationStatus)
async def get_examination_status(
    content_block_id: UUID, user_id: UUID, db: Session = Depends(get_db)
):
    """Whether the user has already sat this examination"""
    return grading_service.get_examination_status(db, content_block_id, user_id)
