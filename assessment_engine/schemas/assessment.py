from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional
from datetime import datetime

from assessment_engine.core.constants import AssessmentStatusEnum
from assessment_engine.utils.clock import as_naive_utc

class AssessmentBase(BaseModel):
    title: str
    description: Optional[str] = None
    deck_id: int
    time_limit_minutes: int = Field(..., gt=0)
    pass_score: int = Field(..., ge=0, le=100)
    question_count: int = Field(..., gt=0)
    shuffle_questions: bool = True
    max_attempts: Optional[int] = Field(None, ge=1)
    cooldown_minutes: Optional[int] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_window(self):
        start_date, end_date = as_naive_utc(self.start_date), as_naive_utc(self.end_date)
        if start_date and end_date and end_date <= start_date:
            raise ValueError("end_date must be after start_date")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Safety Certification",
                "description": "Annual workplace safety assessment",
                "deck_id": 1,
                "time_limit_minutes": 60,
                "pass_score": 70,
                "question_count": 20,
                "shuffle_questions": True,
                "max_attempts": 3,
                "cooldown_minutes": 30,
                "access_code": "SAFE-2026"
            }
        }

class AssessmentCreate(AssessmentBase):
    access_code: Optional[str] = None

class AssessmentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    deck_id: Optional[int] = None
    time_limit_minutes: Optional[int] = Field(None, gt=0)
    pass_score: Optional[int] = Field(None, ge=0, le=100)
    question_count: Optional[int] = Field(None, gt=0)
    shuffle_questions: Optional[bool] = None
    max_attempts: Optional[int] = Field(None, ge=1)
    cooldown_minutes: Optional[int] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    access_code: Optional[str] = None

class Assessment(AssessmentBase):
    id: int
    org_id: int
    status: AssessmentStatusEnum
    requires_access_code: bool = False
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
