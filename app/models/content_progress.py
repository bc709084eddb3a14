"""
ContentProgress model - per user, per content block completion
"""
from sqlalchemy import Column, Integer, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, Uuid, func
from app.database import Base, JSONType
import uuid


class ContentProgress(Base):
    """
    Content progress table - at most one row per (user, content block)
    
    completed_at is stamped when is_completed flips to true and is not
    cleared by later updates.
    """
    __tablename__ = "content_progress"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    content_block_id = Column(Uuid, ForeignKey("content_blocks.id"), nullable=False, index=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    time_spent = Column(Integer, nullable=False, default=0)  # seconds
    completion_data = Column(JSONType)  # e.g. {"quizPassed": true}
    completed_at = Column(TIMESTAMP)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
    
    __table_args__ = (
        UniqueConstraint("user_id", "content_block_id", name="uq_content_progress_user_block"),
    )
    
    def __repr__(self):
        return f"<ContentProgress(user_id={self.user_id}, block_id={self.content_block_id}, completed={self.is_completed})>"
