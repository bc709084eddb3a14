"""
Read-only access to the course hierarchy and quiz questions
"""
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models import (
    ContentBlock,
    LearningSession,
    LessonPlan,
    QuizQuestion,
    Subject,
    Syllabus,
)
from app.utils.cache import cache_service

logger = logging.getLogger(__name__)


class ContentService:
    """
    Lookups against content authored by the workflow system
    
    Subject structure (every active block reachable through
    syllabus -> lesson plan -> session) is cached in Redis per subject.
    """
    
    def get_content_block(self, db: Session, content_block_id: UUID) -> Optional[ContentBlock]:
        return db.query(ContentBlock).filter(ContentBlock.id == content_block_id).first()
    
    def get_session(self, db: Session, session_id: UUID) -> Optional[LearningSession]:
        return db.query(LearningSession).filter(LearningSession.id == session_id).first()
    
    def get_subject(self, db: Session, subject_id: UUID) -> Optional[Subject]:
        return db.query(Subject).filter(Subject.id == subject_id).first()
    
    def get_blocks_by_session(self, db: Session, session_id: UUID) -> List[ContentBlock]:
        return (
            db.query(ContentBlock)
            .filter(ContentBlock.session_id == session_id, ContentBlock.is_active.is_(True))
            .order_by(ContentBlock.order_index)
            .all()
        )
    
    def get_legacy_questions(self, db: Session, content_block_id: UUID) -> List[Dict[str, Any]]:
        """Questions stored one per row in the quiz_questions table"""
        rows = (
            db.query(QuizQuestion)
            .filter(
                QuizQuestion.content_block_id == content_block_id,
                QuizQuestion.is_active.is_(True)
            )
            .order_by(QuizQuestion.order_index)
            .all()
        )
        return [row.to_dict() for row in rows]
    
    def get_questions_for_block(self, db: Session, block: ContentBlock) -> List[Dict[str, Any]]:
        """
        Resolve the question set of a quiz/examination block
        
        Embedded questions in content_data win; the legacy table is only
        consulted when the block has no "questions" key.
        """
        content_data = block.content_data or {}
        embedded = content_data.get("questions") if isinstance(content_data, dict) else None
        
        if embedded:
            logger.debug(f"Using {len(embedded)} embedded questions for block {block.id}")
            return [
                self._normalize_question(question, index)
                for index, question in enumerate(embedded)
            ]
        
        logger.debug(f"No embedded questions for block {block.id}, using question table")
        return self.get_legacy_questions(db, block.id)
    
    def get_subject_blocks(self, db: Session, subject_id: UUID) -> List[Dict[str, Any]]:
        """
        Flatten every active content block reachable from a subject
        
        Returns:
            List of {content_block_id, session_id, session_title, title,
            type, is_required}, ordered by session title then block order
        """
        return cache_service.get_or_load(
            cache_service.course_structure_key(str(subject_id)),
            lambda: self._load_subject_blocks(db, subject_id),
        )
    
    def _load_subject_blocks(self, db: Session, subject_id: UUID) -> List[Dict[str, Any]]:
        rows = (
            db.query(ContentBlock, LearningSession)
            .join(LearningSession, ContentBlock.session_id == LearningSession.id)
            .join(LessonPlan, LearningSession.lesson_plan_id == LessonPlan.id)
            .join(Syllabus, LessonPlan.syllabus_id == Syllabus.id)
            .filter(
                Syllabus.subject_id == subject_id,
                Syllabus.is_active.is_(True),
                LessonPlan.is_active.is_(True),
                LearningSession.is_active.is_(True),
                ContentBlock.is_active.is_(True),
            )
            .order_by(LearningSession.title, ContentBlock.order_index)
            .all()
        )
        
        return [
            {
                "content_block_id": str(block.id),
                "session_id": str(session.id),
                "session_title": session.title,
                "title": block.title,
                "type": block.type,
                "is_required": bool(block.is_required),
            }
            for block, session in rows
        ]
    
    def _normalize_question(self, question: Dict[str, Any], index: int) -> Dict[str, Any]:
        # authored payloads use camelCase and hyphenated types ("multiple-choice")
        question_type = question.get("type") or question.get("questionType") or ""
        correct_answer = question.get("correctAnswer", question.get("correct_answer"))
        return {
            "id": str(question.get("id")),
            "question": question.get("question"),
            "question_type": question_type.replace("-", "_"),
            "options": question.get("options") or None,
            "correct_answer": correct_answer,
            "points": question.get("points") or 1,
            "order_index": index,
        }


# Global instance
content_service = ContentService()
