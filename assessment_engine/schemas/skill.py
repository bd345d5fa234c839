from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class EmployeeSkillScore(BaseModel):
    skill_domain_id: int
    score: float
    assessments_taken: int
    last_assessed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
