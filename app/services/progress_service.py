"""
Progress aggregation service

Rolls per-block completion up into session and course percentages and
pushes the course percentage into the student's enrollment.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import AuthorizationError, LMSError, NotFoundError, OperationError, ValidationError
from app.models import ContentProgress, Enrollment
from app.models.enrollment import STATUS_ACTIVE, STATUS_COMPLETED
from app.services.content_service import content_service
from app.utils.rounding import percentage

logger = logging.getLogger(__name__)


class ProgressService:
    """
    Service for content progress tracking
    
    Only required blocks count towards a percentage. Optional blocks are
    reported in totals but never enter numerator or denominator.
    
    Course percentage is computed over the union of blocks from every
    session of a subject, so sessions are weighted by their number of
    required blocks rather than averaged.
    """
    
    def calculate_statistics(
        self,
        blocks: Iterable[Dict[str, Any]],
        progress_by_block: Dict[str, ContentProgress]
    ) -> Dict[str, int]:
        """
        Aggregate completion over a set of blocks
        
        Args:
            blocks: Dicts with content_block_id and is_required
            progress_by_block: {content_block_id: ContentProgress}
            
        Returns:
            Statistics dictionary
        """
        total_blocks = 0
        completed_blocks = 0
        required_blocks = 0
        completed_required = 0
        total_time_spent = 0
        
        for block in blocks:
            progress = progress_by_block.get(str(block["content_block_id"]))
            is_completed = bool(progress and progress.is_completed)
            
            total_blocks += 1
            completed_blocks += int(is_completed)
            total_time_spent += (progress.time_spent or 0) if progress else 0
            
            if block["is_required"]:
                required_blocks += 1
                completed_required += int(is_completed)
        
        return {
            "total_blocks": total_blocks,
            "completed_blocks": completed_blocks,
            "required_blocks": required_blocks,
            "completed_required_blocks": completed_required,
            "completion_percentage": percentage(completed_required, required_blocks),
            "total_time_spent": total_time_spent,
        }
    
    def get_session_progress(self, db: Session, session_id: UUID, user_id: UUID) -> Dict[str, Any]:
        """
        Per-block progress and statistics for one session
        
        Raises:
            NotFoundError: session does not exist
        """
        _require(session_id, "Session ID")
        _require(user_id, "User ID")
        
        if not content_service.get_session(db, session_id):
            raise NotFoundError("Session")
        
        try:
            blocks = content_service.get_blocks_by_session(db, session_id)
            block_dicts = [_block_dict(block) for block in blocks]
            progress_by_block = self._progress_map(db, user_id, [b["content_block_id"] for b in block_dicts])
            entries = [
                _progress_entry(block, progress_by_block.get(block["content_block_id"]))
                for block in block_dicts
            ]
            statistics = self.calculate_statistics(block_dicts, progress_by_block)
        except Exception as e:
            logger.error(f"Error calculating session progress: {str(e)}", exc_info=True)
            entries, statistics = [], self.calculate_statistics([], {})
        
        return {
            "session_id": str(session_id),
            "user_id": str(user_id),
            "progress": entries,
            "statistics": statistics,
        }
    
    def get_course_progress(self, db: Session, subject_id: UUID, user_id: UUID) -> Dict[str, Any]:
        """
        Progress for every block of every session in a subject
        
        Raises:
            AuthorizationError: user has no active/completed enrollment in the subject
        """
        _require(subject_id, "Subject ID")
        _require(user_id, "User ID")
        
        if not self._is_enrolled(db, subject_id, user_id):
            raise AuthorizationError("Unauthorized: You are not enrolled in this subject")
        
        try:
            blocks = content_service.get_subject_blocks(db, subject_id)
            progress_by_block = self._progress_map(db, user_id, [b["content_block_id"] for b in blocks])
            
            sessions: Dict[str, Dict[str, Any]] = {}
            for block in blocks:
                sessions.setdefault(block["session_id"], {"title": block["session_title"], "blocks": []})
                sessions[block["session_id"]]["blocks"].append(block)
            
            session_progress = []
            for session_id, session in sessions.items():
                stats = self.calculate_statistics(session["blocks"], progress_by_block)
                session_progress.append({
                    "session_id": session_id,
                    "session_title": session["title"],
                    **stats,
                })
            
            entries = [
                _progress_entry(block, progress_by_block.get(block["content_block_id"]))
                for block in blocks
            ]
            overall = self.calculate_statistics(blocks, progress_by_block)
            overall["total_sessions"] = len(sessions)
        except Exception as e:
            logger.error(f"Error calculating course progress: {str(e)}", exc_info=True)
            entries, session_progress = [], []
            overall = self.calculate_statistics([], {})
            overall["total_sessions"] = 0
        
        return {
            "subject_id": str(subject_id),
            "user_id": str(user_id),
            "progress": entries,
            "session_progress": session_progress,
            "overall_statistics": overall,
        }
    
    def calculate_course_percentage(self, db: Session, subject_id: UUID, user_id: UUID) -> int:
        """Required-block completion across the whole subject, 0 on any failure"""
        try:
            return self._course_statistics(db, subject_id, user_id)["completion_percentage"]
        except Exception as e:
            logger.error(f"Error calculating course progress: {str(e)}", exc_info=True)
            return 0
    
    def _course_statistics(self, db: Session, subject_id: UUID, user_id: UUID) -> Dict[str, int]:
        blocks = content_service.get_subject_blocks(db, subject_id)
        progress_by_block = self._progress_map(db, user_id, [b["content_block_id"] for b in blocks])
        stats = self.calculate_statistics(blocks, progress_by_block)
        
        logger.info(
            f"Course progress: subject={subject_id}, user={user_id}, "
            f"required={stats['required_blocks']}, "
            f"completed={stats['completed_required_blocks']}, "
            f"pct={stats['completion_percentage']}"
        )
        return stats
    
    def upsert_progress(
        self,
        db: Session,
        content_block_id: UUID,
        user_id: UUID,
        is_completed: bool,
        time_spent: Optional[int],
        completion_data: Optional[Dict[str, Any]] = None
    ) -> ContentProgress:
        """
        Create or update the (user, block) progress row and commit
        
        completed_at is stamped only when is_completed turns true in this
        call; otherwise the stored value is kept. time_spent=None keeps the
        stored time.
        """
        progress = self._find_progress(db, content_block_id, user_id)
        
        if not progress:
            progress = ContentProgress(
                content_block_id=content_block_id,
                user_id=user_id,
                is_completed=False
            )
            db.add(progress)
            try:
                db.flush()
            except IntegrityError:
                # Concurrent first interaction created the row
                db.rollback()
                progress = self._find_progress(db, content_block_id, user_id)
        
        was_completed = bool(progress.is_completed)
        
        progress.is_completed = is_completed
        if time_spent is not None:
            progress.time_spent = time_spent
        progress.completion_data = completion_data
        if is_completed and not was_completed:
            progress.completed_at = datetime.utcnow()
        
        db.commit()
        db.refresh(progress)
        
        logger.info(
            f"Progress saved: user={user_id}, block={content_block_id}, "
            f"completed={progress.is_completed}, time_spent={progress.time_spent}s"
        )
        return progress
    
    def update_progress(
        self,
        db: Session,
        content_block_id: UUID,
        user_id: UUID,
        is_completed: bool,
        time_spent: int,
        completion_data: Optional[Dict[str, Any]] = None,
        enrollment_id: Optional[UUID] = None
    ) -> Dict[str, Any]:
        """
        Record progress on a block and sync the enrollment percentage
        
        The progress row is the primary write. Enrollment sync runs after it
        is committed and its failure only shows up as enrollment_updated=False.
        """
        _require(content_block_id, "Content block ID")
        _require(user_id, "User ID")
        if not isinstance(is_completed, bool):
            raise ValidationError("is_completed must be a boolean")
        if not isinstance(time_spent, int) or isinstance(time_spent, bool) or time_spent < 0:
            raise ValidationError("time_spent must be a non-negative number")
        
        try:
            block = content_service.get_content_block(db, content_block_id)
            if not block:
                raise NotFoundError("Content block")
            
            progress = self.upsert_progress(
                db, content_block_id, user_id, is_completed, time_spent, completion_data
            )
            session_stats = self._session_statistics(db, block.session_id, user_id)
            
            enrollment_updated = False
            course_percentage = None
            if enrollment_id:
                enrollment_updated, course_percentage = self.sync_enrollment(db, enrollment_id, user_id)
            
            return {
                "progress": serialize_progress(progress),
                "session_progress": {
                    "completion_percentage": session_stats["completion_percentage"],
                    "completed_blocks": session_stats["completed_required_blocks"],
                    "total_required_blocks": session_stats["required_blocks"],
                },
                "course_percentage": course_percentage,
                "enrollment_updated": enrollment_updated,
            }
        except LMSError:
            raise
        except Exception as e:
            logger.error(f"Failed to update progress: {str(e)}", exc_info=True)
            db.rollback()
            raise OperationError("update session progress")
    
    def sync_enrollment(self, db: Session, enrollment_id: UUID, user_id: UUID):
        """
        Push the cross-session course percentage into an enrollment
        
        Returns:
            Tuple of (updated, percentage); failures are logged, not raised
        """
        try:
            enrollment = db.query(Enrollment).filter(Enrollment.id == enrollment_id).first()
            if not enrollment:
                logger.warning(f"Enrollment {enrollment_id} not found for progress sync")
                return False, None
            
            if str(enrollment.student_id) != str(user_id):
                logger.warning(f"Enrollment {enrollment_id} does not belong to user {user_id}")
                return False, None
            
            course_pct = self._course_statistics(db, enrollment.subject_id, user_id)["completion_percentage"]
            enrollment.update_progress(course_pct)
            db.commit()
            
            logger.info(
                f"Enrollment {enrollment_id} synced: progress={enrollment.progress_percentage}, "
                f"status={enrollment.status}"
            )
            return True, enrollment.progress_percentage
        except Exception as e:
            logger.error(f"Error syncing enrollment progress: {str(e)}", exc_info=True)
            db.rollback()
            return False, None
    
    def _session_statistics(self, db: Session, session_id: UUID, user_id: UUID) -> Dict[str, int]:
        try:
            blocks = [_block_dict(block) for block in content_service.get_blocks_by_session(db, session_id)]
            progress_by_block = self._progress_map(db, user_id, [b["content_block_id"] for b in blocks])
            return self.calculate_statistics(blocks, progress_by_block)
        except Exception as e:
            logger.error(f"Error calculating session progress: {str(e)}", exc_info=True)
            return self.calculate_statistics([], {})
    
    def _progress_map(self, db: Session, user_id: UUID, block_ids: List[str]) -> Dict[str, ContentProgress]:
        if not block_ids:
            return {}
        rows = (
            db.query(ContentProgress)
            .filter(
                ContentProgress.user_id == user_id,
                ContentProgress.content_block_id.in_([_as_uuid(b) for b in block_ids])
            )
            .all()
        )
        return {str(row.content_block_id): row for row in rows}
    
    def _find_progress(self, db: Session, content_block_id: UUID, user_id: UUID) -> Optional[ContentProgress]:
        return db.query(ContentProgress).filter(
            ContentProgress.content_block_id == content_block_id,
            ContentProgress.user_id == user_id
        ).first()
    
    def _is_enrolled(self, db: Session, subject_id: UUID, user_id: UUID) -> bool:
        enrollment = db.query(Enrollment).filter(
            Enrollment.student_id == user_id,
            Enrollment.subject_id == subject_id,
            Enrollment.status.in_([STATUS_ACTIVE, STATUS_COMPLETED])
        ).first()
        return enrollment is not None


def serialize_progress(progress: ContentProgress) -> Dict[str, Any]:
    return {
        "id": str(progress.id),
        "content_block_id": str(progress.content_block_id),
        "user_id": str(progress.user_id),
        "is_completed": progress.is_completed,
        "time_spent": progress.time_spent,
        "completion_data": progress.completion_data,
        "completed_at": progress.completed_at,
    }


def _block_dict(block) -> Dict[str, Any]:
    return {
        "content_block_id": str(block.id),
        "session_id": str(block.session_id),
        "title": block.title,
        "type": block.type,
        "is_required": bool(block.is_required),
    }


def _progress_entry(block: Dict[str, Any], progress: Optional[ContentProgress]) -> Dict[str, Any]:
    return {
        "content_block_id": block["content_block_id"],
        "session_id": block["session_id"],
        "content_block_title": block["title"],
        "content_block_type": block["type"],
        "is_required": block["is_required"],
        "is_completed": bool(progress and progress.is_completed),
        "time_spent": (progress.time_spent or 0) if progress else 0,
        "completion_data": progress.completion_data if progress else None,
        "completed_at": progress.completed_at if progress else None,
    }


def _require(value, name: str) -> None:
    if not value:
        raise ValidationError(f"{name} is required")


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


# Global instance
progress_service = ProgressService()
