from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import JSONB
from assessment_engine.core.database import Base

class Deck(Base):
    __tablename__ = "decks"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    organization = relationship("Organization", back_populates="decks")
    cards = relationship("Card", back_populates="deck", cascade="all, delete-orphan", order_by="Card.id")
    skill_mappings = relationship("DeckSkillMapping", back_populates="deck", cascade="all, delete-orphan")


class Card(Base):
    __tablename__ = "cards"

    id = Column(Integer, primary_key=True, index=True)
    deck_id = Column(Integer, ForeignKey("decks.id"), nullable=False, index=True)
    stem = Column(String, nullable=False)
    options = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    correct_index = Column(Integer, nullable=False) # Index into options
    explanation = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    deck = relationship("Deck", back_populates="cards")
