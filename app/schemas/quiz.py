"""
Pydantic schemas for quiz/examination attempts
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional
from uuid import UUID
from datetime import datetime


class QuizSubmission(BaseModel):
    """Schema for quiz/examination submission"""
    user_id: UUID
    answers: Dict[str, Any] = Field(..., description="{question_id: answer}")
    time_spent_seconds: int = Field(..., ge=0, description="Time spent in seconds")
    enrollment_id: Optional[UUID] = None


class AttemptResponse(BaseModel):
    """Stored attempt"""
    id: UUID
    content_block_id: UUID
    user_id: UUID
    attempt_number: int
    score: int
    max_score: int
    percentage: int
    is_passed: bool
    time_spent_seconds: int
    started_at: datetime
    completed_at: datetime
    
    class Config:
        from_attributes = True


class AttemptFeedback(BaseModel):
    correct_answers: int
    total_questions: int
    passing_percentage: int
    message: str


class QuizGradingResponse(BaseModel):
    """Response after quiz grading"""
    attempt: AttemptResponse
    feedback: AttemptFeedback


class AttemptHistoryResponse(BaseModel):
    content_block_id: UUID
    user_id: UUID
    attempts: List[AttemptResponse]
    total_attempts: int
    best_percentage: Optional[int] = None


class ExaminationStatus(BaseModel):
    content_block_id: UUID
    user_id: UUID
    has_attempted: bool
    can_attempt: bool
    attempt: Optional[AttemptResponse] = None
