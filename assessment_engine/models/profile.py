from sqlalchemy import Boolean, Column, String, Integer, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from assessment_engine.core.database import Base

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    email_notifications = Column(Boolean(), default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    assessment_sessions = relationship("AssessmentSession", back_populates="user")
    skill_scores = relationship("EmployeeSkillScore", back_populates="user", cascade="all, delete-orphan")
