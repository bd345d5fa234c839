from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class AssessmentAnswerBase(BaseModel):
    session_id: int
    question_id: int

class AssessmentAnswerCreate(AssessmentAnswerBase):
    pass

class AssessmentAnswerUpdate(BaseModel):
    selected_index: Optional[int] = None
    is_correct: Optional[bool] = None
    answered_at: Optional[datetime] = None
    time_spent_seconds: Optional[int] = None

class AssessmentAnswer(AssessmentAnswerBase):
    id: int
    selected_index: Optional[int] = None
    is_correct: Optional[bool] = None
    answered_at: Optional[datetime] = None
    time_spent_seconds: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
