"""
Assignment submission and manual grading service
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import BusinessRuleViolation, LMSError, NotFoundError, OperationError, ValidationError
from app.models import AssignmentSubmission
from app.models.assignment_submission import STATUS_GRADED, STATUS_SUBMITTED
from app.services.content_service import content_service
from app.services.progress_service import progress_service

logger = logging.getLogger(__name__)

FORMAT_TEXT = "text"
FORMAT_FILE = "file"
FORMAT_BOTH = "both"


class AssignmentService:
    """
    One submission per (user, assignment); grading is one-way
    
    submitted --grade()--> graded. A passing grade marks the block complete.
    """
    
    def __init__(self, passing_percentage: int = None):
        if passing_percentage is None:
            passing_percentage = settings.ASSIGNMENT_PASSING_PERCENTAGE
        self.passing_percentage = passing_percentage
    
    def submit(
        self,
        db: Session,
        content_block_id: UUID,
        user_id: UUID,
        submission_text: Optional[str] = None,
        submission_files: Optional[List[Dict[str, Any]]] = None
    ) -> AssignmentSubmission:
        """
        Store a submission after checking the block's submission format
        
        Formats (content_data.submissionFormat): "text", "file" or "both"
        where "both" accepts either.
        """
        if not content_block_id:
            raise ValidationError("Content block ID is required")
        if not user_id:
            raise ValidationError("User ID is required")
        
        try:
            block = content_service.get_content_block(db, content_block_id)
            if not block:
                raise NotFoundError("Assignment")
            if block.type != "assignment":
                raise ValidationError("Content block is not an assignment")
            
            if self.get_submission(db, content_block_id, user_id):
                raise BusinessRuleViolation(
                    "You have already submitted this assignment. Resubmission is not allowed."
                )
            
            content_data = block.content_data or {}
            submission_format = content_data.get("submissionFormat", FORMAT_BOTH)
            has_text = bool(submission_text and submission_text.strip())
            has_files = bool(submission_files)
            
            if submission_format == FORMAT_TEXT and not has_text:
                raise ValidationError("Text submission is required for this assignment")
            if submission_format == FORMAT_FILE and not has_files:
                raise ValidationError("File submission is required for this assignment")
            if not has_text and not has_files:
                raise ValidationError("Either text or file submission is required for this assignment")
            
            uploaded_at = datetime.utcnow().isoformat()
            submission = AssignmentSubmission(
                content_block_id=content_block_id,
                user_id=user_id,
                submission_text=submission_text if has_text else None,
                submission_files=[
                    {**f, "uploaded_at": uploaded_at} for f in submission_files
                ] if has_files else None,
                max_score=content_data.get("maxPoints") or settings.DEFAULT_ASSIGNMENT_MAX_SCORE,
                status=STATUS_SUBMITTED,
                is_passed=False,
            )
            db.add(submission)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise BusinessRuleViolation(
                    "You have already submitted this assignment. Resubmission is not allowed."
                )
            db.refresh(submission)
            
            logger.info(f"Assignment submitted: block={content_block_id}, user={user_id}, id={submission.id}")
            return submission
        except LMSError:
            raise
        except Exception as e:
            logger.error(f"Failed to submit assignment: {str(e)}", exc_info=True)
            db.rollback()
            raise OperationError("submit assignment")
    
    def grade(
        self,
        db: Session,
        submission_id: UUID,
        graded_by: UUID,
        score: float,
        max_score: Optional[float] = None,
        feedback: Optional[str] = None,
        rubric_scores: Optional[List[Dict[str, Any]]] = None
    ) -> AssignmentSubmission:
        """
        Grade a submission once; a pass marks the block complete for the student
        """
        if not submission_id:
            raise ValidationError("Submission ID is required")
        if not graded_by:
            raise ValidationError("Grader ID is required")
        
        try:
            submission = db.query(AssignmentSubmission).filter(
                AssignmentSubmission.id == submission_id
            ).first()
            if not submission:
                raise NotFoundError("Assignment submission")
            if submission.status == STATUS_GRADED:
                raise BusinessRuleViolation("This assignment has already been graded")
            
            max_score = float(max_score if max_score is not None else submission.max_score)
            if max_score <= 0:
                raise ValidationError("Max score must be positive")
            if score < 0 or score > max_score:
                raise BusinessRuleViolation(f"Score must be between 0 and {max_score:g}")
            
            pct = score / max_score * 100
            submission.score = score
            submission.max_score = max_score
            submission.percentage = round(pct, 2)
            submission.is_passed = pct >= self.passing_percentage
            submission.feedback = feedback
            submission.rubric_scores = rubric_scores
            submission.graded_by = graded_by
            submission.graded_at = datetime.utcnow()
            submission.status = STATUS_GRADED
            db.commit()
            db.refresh(submission)
            
            logger.info(
                f"Assignment graded: id={submission_id}, score={score}/{max_score:g}, "
                f"passed={submission.is_passed}"
            )
            
            if submission.is_passed:
                self._mark_block_complete(db, submission)
            
            return submission
        except LMSError:
            raise
        except Exception as e:
            logger.error(f"Failed to grade assignment: {str(e)}", exc_info=True)
            db.rollback()
            raise OperationError("grade assignment")
    
    def get_submission(self, db: Session, content_block_id: UUID, user_id: UUID) -> Optional[AssignmentSubmission]:
        return db.query(AssignmentSubmission).filter(
            AssignmentSubmission.content_block_id == content_block_id,
            AssignmentSubmission.user_id == user_id
        ).first()
    
    def _mark_block_complete(self, db: Session, submission: AssignmentSubmission) -> None:
        try:
            progress_service.upsert_progress(
                db,
                content_block_id=submission.content_block_id,
                user_id=submission.user_id,
                is_completed=True,
                time_spent=None,
                completion_data={"assignmentPassed": True},
            )
        except Exception as e:
            # Grading already committed
            logger.error(f"Failed to update progress on assignment pass: {str(e)}", exc_info=True)
            db.rollback()


def serialize_submission(submission: AssignmentSubmission) -> Dict[str, Any]:
    def _num(value):
        return float(value) if value is not None else None
    
    return {
        "id": str(submission.id),
        "content_block_id": str(submission.content_block_id),
        "user_id": str(submission.user_id),
        "submission_text": submission.submission_text,
        "submission_files": submission.submission_files,
        "submitted_at": submission.submitted_at,
        "status": submission.status,
        "score": _num(submission.score),
        "max_score": _num(submission.max_score),
        "percentage": _num(submission.percentage),
        "is_passed": bool(submission.is_passed),
        "feedback": submission.feedback,
        "graded_by": str(submission.graded_by) if submission.graded_by else None,
        "graded_at": submission.graded_at,
    }


# Global instance
assignment_service = AssignmentService()
