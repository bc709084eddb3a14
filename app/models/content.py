"""
Course hierarchy models

Subject -> Syllabus -> LessonPlan -> LearningSession -> ContentBlock.
Authored by the workflow system; this service only reads them.
"""
from sqlalchemy import Column, String, Integer, Boolean, Text, TIMESTAMP, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from app.database import Base, JSONType
import uuid


class Subject(Base):
    """
    Institutional subject mapped to a semester of a program
    """
    __tablename__ = "subjects"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(30), nullable=False)
    name = Column(String(255), nullable=False)
    credits = Column(Integer)
    semester_number = Column(Integer, nullable=False)
    
    syllabi = relationship("Syllabus", back_populates="subject")
    
    def __repr__(self):
        return f"<Subject(id={self.id}, code={self.code})>"


class Syllabus(Base):
    __tablename__ = "syllabi"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False, index=True)
    title = Column(String(255))
    is_active = Column(Boolean, default=True)
    
    subject = relationship("Subject", back_populates="syllabi")
    lesson_plans = relationship("LessonPlan", back_populates="syllabus")


class LessonPlan(Base):
    __tablename__ = "lesson_plans"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    syllabus_id = Column(Uuid, ForeignKey("syllabi.id"), nullable=False, index=True)
    title = Column(String(255))
    is_active = Column(Boolean, default=True)
    
    syllabus = relationship("Syllabus", back_populates="lesson_plans")
    sessions = relationship("LearningSession", back_populates="lesson_plan")


class LearningSession(Base):
    """
    A teaching session inside a lesson plan, made of ordered content blocks
    """
    __tablename__ = "learning_sessions"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    lesson_plan_id = Column(Uuid, ForeignKey("lesson_plans.id"), nullable=False, index=True)
    title = Column(String(255))
    is_active = Column(Boolean, default=True)
    
    lesson_plan = relationship("LessonPlan", back_populates="sessions")
    content_blocks = relationship(
        "ContentBlock",
        back_populates="session",
        order_by="ContentBlock.order_index"
    )
    
    def __repr__(self):
        return f"<LearningSession(id={self.id}, title={self.title})>"


class ContentBlock(Base):
    """
    Unit of consumable content (video, text, pdf, quiz, assignment, examination)
    
    content_data holds type specific payload, e.g. {"questions": [...]} for
    quizzes or {"submissionFormat": "text", "maxPoints": 20} for assignments.
    """
    __tablename__ = "content_blocks"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(Uuid, ForeignKey("learning_sessions.id"), nullable=False, index=True)
    title = Column(String(255))
    type = Column(String(30), nullable=False)
    content_data = Column(JSONType)
    is_required = Column(Boolean, default=True)
    order_index = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    
    session = relationship("LearningSession", back_populates="content_blocks")
    
    def __repr__(self):
        return f"<ContentBlock(id={self.id}, type={self.type}, required={self.is_required})>"


class QuizQuestion(Base):
    """
    Legacy per-row question store, used when a block carries no embedded questions
    """
    __tablename__ = "quiz_questions"
    
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    content_block_id = Column(Uuid, ForeignKey("content_blocks.id"), nullable=False, index=True)
    question_text = Column(Text)
    question_type = Column(String(30), nullable=False)
    options = Column(JSONType)  # ["Option A", "Option B", ...]
    correct_answer = Column(JSONType)  # index, [indices], bool/0-1 or text
    explanation = Column(Text)
    points = Column(Integer, default=1)
    order_index = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    
    def to_dict(self):
        return {
            "id": str(self.id),
            "question": self.question_text,
            "question_type": self.question_type,
            "options": self.options,
            "correct_answer": self.correct_answer,
            "points": self.points or 1,
            "order_index": self.order_index
        }
