from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from assessment_engine.core.database import Base

class SkillDomain(Base):
    __tablename__ = "skill_domains"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    deck_mappings = relationship("DeckSkillMapping", back_populates="skill_domain", cascade="all, delete-orphan")


class DeckSkillMapping(Base):
    __tablename__ = "deck_skill_mappings"
    __table_args__ = (
        UniqueConstraint("deck_id", "skill_domain_id", name="uq_deck_skill_mappings_deck_domain"),
    )

    id = Column(Integer, primary_key=True, index=True)
    deck_id = Column(Integer, ForeignKey("decks.id"), nullable=False)
    skill_domain_id = Column(Integer, ForeignKey("skill_domains.id"), nullable=False)

    deck = relationship("Deck", back_populates="skill_mappings")
    skill_domain = relationship("SkillDomain", back_populates="deck_mappings")


class EmployeeSkillScore(Base):
    __tablename__ = "employee_skill_scores"
    __table_args__ = (
        UniqueConstraint("org_id", "user_id", "skill_domain_id", name="uq_employee_skill_scores_org_user_domain"),
    )

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(Integer, ForeignKey("organizations.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    skill_domain_id = Column(Integer, ForeignKey("skill_domains.id"), nullable=False)
    score = Column(Float, nullable=False, default=0.0)
    assessments_taken = Column(Integer, nullable=False, default=0)
    last_assessed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("Profile", back_populates="skill_scores")
    skill_domain = relationship("SkillDomain")
