import uuid
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from assessment_engine.core.database import Base
from assessment_engine.core.config import settings

class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, index=True)
    # Public identifier used in verification links
    serial = Column(String, unique=True, nullable=False, default=lambda: uuid.uuid4().hex)
    session_id = Column(Integer, ForeignKey("assessment_sessions.id", ondelete="CASCADE"), unique=True, nullable=False)
    issued_at = Column(DateTime, server_default=func.now())

    session = relationship("AssessmentSession")

    @property
    def verification_url(self):
        return f"{settings.CERTIFICATE_BASE_URL}/{self.serial}"
