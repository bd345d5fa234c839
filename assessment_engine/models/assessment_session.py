from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Enum, Index, JSON, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import JSONB
from assessment_engine.core.database import Base
from assessment_engine.core.constants import SessionStatusEnum

class AssessmentSession(Base):
    __tablename__ = "assessment_sessions"
    __table_args__ = (
        # At most one in-progress attempt per candidate and assessment
        Index(
            "uq_assessment_sessions_one_in_progress",
            "assessment_id",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
        Index("ix_assessment_sessions_assessment_status", "assessment_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    question_order = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    status = Column(
        Enum(SessionStatusEnum, name="sessionstatusenum",
             values_callable=lambda enum: [member.value for member in enum]),
        nullable=False,
        default=SessionStatusEnum.IN_PROGRESS,
    )
    started_at = Column(DateTime, nullable=False, server_default=func.now())
    completed_at = Column(DateTime, nullable=True)
    time_remaining_seconds = Column(Integer, nullable=True) # Client snapshot, resume hint only
    score = Column(Integer, nullable=True)
    passed = Column(Boolean, nullable=True)
    tab_switch_count = Column(Integer, nullable=False, default=0)
    tab_switch_log = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    ip_address = Column(String, nullable=True)
    certificate_url = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    assessment = relationship("Assessment", back_populates="sessions")
    user = relationship("Profile", back_populates="assessment_sessions")
    answers = relationship(
        "AssessmentAnswer",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
