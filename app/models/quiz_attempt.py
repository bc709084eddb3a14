"""
QuizAttempt model - immutable scoring record for one quiz/examination submission
"""
from sqlalchemy import Column, String, Integer, Boolean, TIMESTAMP, ForeignKey, Index, Uuid, func, text
from app.database import Base, JSONType
import uuid


class QuizAttempt(Base):
    """
    Quiz attempts table - written once per submission, never updated
    
    The partial unique index backs the single-attempt rule for examinations
    at storage level, closing the race between two concurrent submissions.
    """
    __tablename__ = "quiz_attempts"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    content_block_id = Column(Uuid, ForeignKey("content_blocks.id"), nullable=False)
    user_id = Column(Uuid, nullable=False, index=True)
    block_type = Column(String(30), nullable=False)  # quiz | examination
    attempt_number = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)
    max_score = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False)
    is_passed = Column(Boolean, nullable=False)
    time_spent_seconds = Column(Integer, nullable=False, default=0)
    started_at = Column(TIMESTAMP)
    completed_at = Column(TIMESTAMP)
    answers = Column(JSONType)  # {question_id: answer}
    created_at = Column(TIMESTAMP, server_default=func.now())
    
    __table_args__ = (
        Index("idx_quiz_attempts_user_block", "user_id", "content_block_id"),
        Index(
            "uq_quiz_attempts_single_examination",
            "user_id",
            "content_block_id",
            unique=True,
            postgresql_where=text("block_type = 'examination'"),
            sqlite_where=text("block_type = 'examination'"),
        ),
    )
    
    def __repr__(self):
        return f"<QuizAttempt(user_id={self.user_id}, block_id={self.content_block_id}, attempt={self.attempt_number}, score={self.score}/{self.max_score})>"
