"""
Quiz and examination scoring service

Grades every question with the deterministic AnswerGrader, stores an
immutable attempt row and, on a pass, marks the content block complete.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import BusinessRuleViolation, LMSError, NotFoundError, OperationError, ValidationError
from app.models import QuizAttempt
from app.services.answer_grader import answer_grader
from app.services.content_service import content_service
from app.services.progress_service import progress_service
from app.utils.rounding import percentage as to_percentage

logger = logging.getLogger(__name__)

QUIZ = "quiz"
EXAMINATION = "examination"
GRADABLE_TYPES = (QUIZ, EXAMINATION)


class GradingService:
    """
    Service for scoring quiz/examination submissions
    
    Attempt policy:
    - quiz: unlimited attempts, numbered 1, 2, 3...
    - examination: exactly one attempt per user
    
    A submission passes at QUIZ_PASSING_PERCENTAGE (70%). Unanswered
    questions still count towards max_score.
    """
    
    def __init__(self, passing_percentage: int = None):
        if passing_percentage is None:
            passing_percentage = settings.QUIZ_PASSING_PERCENTAGE
        self.passing_percentage = passing_percentage
    
    def submit_quiz_attempt(
        self,
        db: Session,
        content_block_id: UUID,
        user_id: UUID,
        answers: Dict[str, Any],
        time_spent_seconds: int,
        enrollment_id: Optional[UUID] = None
    ) -> Dict[str, Any]:
        """
        Score a submission and record the attempt
        
        Args:
            db: Database session
            content_block_id: Quiz or examination block
            user_id: Submitting user
            answers: {question_id: answer}
            time_spent_seconds: Time taken for this attempt
            enrollment_id: Optional enrollment to sync when the pass completes the block
            
        Returns:
            Dictionary with "attempt" and "feedback"
        """
        self._validate_submission(content_block_id, user_id, answers, time_spent_seconds)
        
        try:
            block = content_service.get_content_block(db, content_block_id)
            if not block:
                raise NotFoundError("Content block")
            if block.type not in GRADABLE_TYPES:
                raise ValidationError("This content block is not a quiz or examination")
            
            questions = content_service.get_questions_for_block(db, block)
            if not questions:
                raise ValidationError("No questions found for this quiz")
            
            previous_attempts = self.get_attempts(db, content_block_id, user_id)
            if block.type == EXAMINATION and previous_attempts:
                raise BusinessRuleViolation(
                    "Examination can only be attempted once. "
                    "You have already submitted this examination."
                )
            
            score, max_score, correct_answers = self.calculate_score(questions, answers)
            pct = to_percentage(score, max_score)
            is_passed = pct >= self.passing_percentage
            attempt_number = len(previous_attempts) + 1
            
            attempt = self._save_attempt(
                db,
                block_type=block.type,
                content_block_id=content_block_id,
                user_id=user_id,
                attempt_number=attempt_number,
                score=score,
                max_score=max_score,
                percentage=pct,
                is_passed=is_passed,
                time_spent_seconds=time_spent_seconds,
                answers=answers,
            )
            
            logger.info(
                f"{block.type.capitalize()} attempt saved: block={content_block_id}, "
                f"user={user_id}, attempt={attempt_number}, score={score}/{max_score} ({pct}%)"
            )
            
            if is_passed:
                self._mark_block_complete(
                    db, content_block_id, user_id, time_spent_seconds, attempt, enrollment_id
                )
            
            return {
                "attempt": serialize_attempt(attempt),
                "feedback": {
                    "correct_answers": correct_answers,
                    "total_questions": len(questions),
                    "passing_percentage": self.passing_percentage,
                    "message": self._generate_feedback(is_passed, pct, attempt_number),
                },
            }
        except LMSError:
            raise
        except Exception as e:
            logger.error(f"Failed to submit quiz attempt: {str(e)}", exc_info=True)
            db.rollback()
            raise OperationError("submit quiz attempt")
    
    def calculate_score(
        self,
        questions: List[Dict[str, Any]],
        answers: Dict[str, Any]
    ) -> Tuple[int, int, int]:
        """
        Sum points over correctly answered questions
        
        Returns:
            Tuple of (score, max_score, correct_answers)
        """
        score = 0
        max_score = 0
        correct_answers = 0
        
        for question in questions:
            points = question.get("points") or 1
            max_score += points
            
            question_id = str(question["id"])
            if question_id not in answers:
                continue
            
            if answer_grader.is_correct(question, answers[question_id]):
                score += points
                correct_answers += 1
        
        return score, max_score, correct_answers
    
    def get_attempts(self, db: Session, content_block_id: UUID, user_id: UUID) -> List[QuizAttempt]:
        """A user's attempts on a block, oldest first"""
        return (
            db.query(QuizAttempt)
            .filter(
                QuizAttempt.content_block_id == content_block_id,
                QuizAttempt.user_id == user_id
            )
            .order_by(QuizAttempt.attempt_number)
            .all()
        )
    
    def get_examination_status(self, db: Session, content_block_id: UUID, user_id: UUID) -> Dict[str, Any]:
        """Whether the user may still sit an examination"""
        block = content_service.get_content_block(db, content_block_id)
        if not block:
            raise NotFoundError("Content block")
        if block.type != EXAMINATION:
            raise ValidationError("This content block is not an examination")
        
        attempts = self.get_attempts(db, content_block_id, user_id)
        last_attempt = attempts[-1] if attempts else None
        
        return {
            "content_block_id": str(content_block_id),
            "user_id": str(user_id),
            "has_attempted": last_attempt is not None,
            "can_attempt": last_attempt is None,
            "attempt": serialize_attempt(last_attempt) if last_attempt else None,
        }
    
    def _validate_submission(self, content_block_id, user_id, answers, time_spent_seconds) -> None:
        if not content_block_id:
            raise ValidationError("Content block ID is required")
        if not user_id:
            raise ValidationError("User ID is required")
        if not isinstance(answers, dict) or not answers:
            raise ValidationError("Answers are required")
        if (
            not isinstance(time_spent_seconds, int)
            or isinstance(time_spent_seconds, bool)
            or time_spent_seconds < 0
        ):
            raise ValidationError("Time spent must be a non-negative number")
    
    def _save_attempt(self, db: Session, **fields) -> QuizAttempt:
        completed_at = datetime.utcnow()
        attempt = QuizAttempt(
            started_at=completed_at - timedelta(seconds=fields["time_spent_seconds"]),
            completed_at=completed_at,
            **fields
        )
        db.add(attempt)
        try:
            db.commit()
        except IntegrityError:
            # Lost the race against a concurrent examination submission
            db.rollback()
            raise BusinessRuleViolation(
                "Examination can only be attempted once. "
                "You have already submitted this examination."
            )
        db.refresh(attempt)
        return attempt
    
    def _mark_block_complete(
        self,
        db: Session,
        content_block_id: UUID,
        user_id: UUID,
        time_spent_seconds: int,
        attempt: QuizAttempt,
        enrollment_id: Optional[UUID]
    ) -> None:
        try:
            progress_service.update_progress(
                db,
                content_block_id=content_block_id,
                user_id=user_id,
                is_completed=True,
                time_spent=time_spent_seconds,
                completion_data={
                    "quizPassed": True,
                    "attemptNumber": attempt.attempt_number,
                    "percentage": attempt.percentage,
                },
                enrollment_id=enrollment_id,
            )
        except Exception as e:
            # Attempt is already stored; completion is best effort
            logger.error(f"Error updating progress on quiz pass: {str(e)}", exc_info=True)
    
    def _generate_feedback(self, is_passed: bool, pct: int, attempt_number: int) -> str:
        """Feedback message by score band"""
        if not is_passed:
            return (
                f"You scored {pct}% on attempt {attempt_number}. "
                f"You need {self.passing_percentage}% to pass. "
                "Review the material and try again!"
            )
        if pct == 100:
            return f"Perfect score! You got 100% on attempt {attempt_number}. Excellent work!"
        if pct >= 90:
            return f"Great job! You scored {pct}% on attempt {attempt_number}. Well done!"
        return f"Good work! You passed with {pct}% on attempt {attempt_number}. Keep it up!"


def serialize_attempt(attempt: QuizAttempt) -> Dict[str, Any]:
    return {
        "id": str(attempt.id),
        "content_block_id": str(attempt.content_block_id),
        "user_id": str(attempt.user_id),
        "attempt_number": attempt.attempt_number,
        "score": attempt.score,
        "max_score": attempt.max_score,
        "percentage": attempt.percentage,
        "is_passed": attempt.is_passed,
        "time_spent_seconds": attempt.time_spent_seconds,
        "started_at": attempt.started_at,
        "completed_at": attempt.completed_at,
    }


# Global instance
grading_service = GradingService()
