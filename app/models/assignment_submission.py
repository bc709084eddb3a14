"""
AssignmentSubmission model - one submission per (user, assignment block)
"""
from sqlalchemy import Column, String, Text, Boolean, Numeric, TIMESTAMP, ForeignKey, UniqueConstraint, Uuid, func
from app.database import Base, JSONType
import uuid

STATUS_SUBMITTED = "submitted"
STATUS_GRADED = "graded"
STATUS_RETURNED = "returned"
STATUS_RESUBMITTED = "resubmitted"


class AssignmentSubmission(Base):
    """
    Assignment submissions table - grading fields stay null until graded
    """
    __tablename__ = "assignment_submissions"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    content_block_id = Column(Uuid, ForeignKey("content_blocks.id"), nullable=False)
    user_id = Column(Uuid, nullable=False, index=True)
    submission_text = Column(Text)
    submission_files = Column(JSONType)  # [{"file_name", "file_url", "file_size", "uploaded_at"}]
    submitted_at = Column(TIMESTAMP, server_default=func.now())
    status = Column(String(20), nullable=False, default=STATUS_SUBMITTED)
    score = Column(Numeric(6, 2))
    max_score = Column(Numeric(6, 2))
    percentage = Column(Numeric(5, 2))
    is_passed = Column(Boolean, default=False)
    feedback = Column(Text)
    rubric_scores = Column(JSONType)
    graded_by = Column(Uuid)
    graded_at = Column(TIMESTAMP)
    
    __table_args__ = (
        UniqueConstraint("user_id", "content_block_id", name="uq_assignment_submission_user_block"),
    )
    
    def __repr__(self):
        return f"<AssignmentSubmission(id={self.id}, user_id={self.user_id}, status={self.status})>"
