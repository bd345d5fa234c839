from sqlalchemy import Column, Integer, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from assessment_engine.core.database import Base

class AssessmentAnswer(Base):
    __tablename__ = "assessment_answers"
    __table_args__ = (
        UniqueConstraint("session_id", "question_id", name="uq_assessment_answers_session_question"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("assessment_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("cards.id"), nullable=False)
    selected_index = Column(Integer, nullable=True) # None until answered
    is_correct = Column(Boolean, nullable=True)
    answered_at = Column(DateTime, nullable=True)
    time_spent_seconds = Column(Integer, nullable=True)

    session = relationship("AssessmentSession", back_populates="answers")
    question = relationship("Card")
