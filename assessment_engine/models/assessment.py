from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from assessment_engine.core.database import Base
from assessment_engine.core.constants import AssessmentStatusEnum

class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    deck_id = Column(Integer, ForeignKey("decks.id"), nullable=False)
    title = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    time_limit_minutes = Column(Integer, nullable=False)
    pass_score = Column(Integer, nullable=False)
    question_count = Column(Integer, nullable=False)
    shuffle_questions = Column(Boolean, default=True, nullable=False)
    max_attempts = Column(Integer, nullable=True)
    cooldown_minutes = Column(Integer, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    access_code = Column(String, nullable=True)
    status = Column(
        Enum(AssessmentStatusEnum, name="assessmentstatusenum",
             values_callable=lambda enum: [member.value for member in enum]),
        nullable=False,
        default=AssessmentStatusEnum.DRAFT,
    )
    created_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    organization = relationship("Organization", back_populates="assessments")
    deck = relationship("Deck")
    sessions = relationship("AssessmentSession", back_populates="assessment", cascade="all, delete-orphan")

    @property
    def requires_access_code(self):
        return bool(self.access_code)
