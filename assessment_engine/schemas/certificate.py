from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

class CertificateCreate(BaseModel):
    session_id: int

class Certificate(CertificateCreate):
    id: int
    serial: str
    verification_url: str
    issued_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
