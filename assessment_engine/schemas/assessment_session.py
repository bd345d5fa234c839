from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from assessment_engine.core.constants import ErrorCode, SessionStatusEnum

class AssessmentSessionBase(BaseModel):
    assessment_id: int
    user_id: int
    question_order: List[int]
    status: SessionStatusEnum = Field(default=SessionStatusEnum.IN_PROGRESS)
    started_at: Optional[datetime] = None
    time_remaining_seconds: Optional[int] = None
    ip_address: Optional[str] = None

class AssessmentSessionCreate(AssessmentSessionBase):
    pass

class AssessmentSession(AssessmentSessionBase):
    id: int
    completed_at: Optional[datetime] = None
    score: Optional[int] = None
    passed: Optional[bool] = None
    tab_switch_count: int = 0
    certificate_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class StartSessionRequest(BaseModel):
    access_code: Optional[str] = None

class SubmitAnswerRequest(BaseModel):
    question_id: int
    selected_index: int = Field(..., ge=0)
    time_remaining_seconds: Optional[int] = None
    time_spent_seconds: Optional[float] = Field(None, ge=0)


class AnswerResult(BaseModel):
    is_correct: bool

class CompletionResult(BaseModel):
    score: int
    passed: bool
    total: int
    correct: int

class ExpiryResult(BaseModel):
    expired_count: int

class PercentileResult(BaseModel):
    percentile: int
    rank: int
    total_sessions: int


class SessionQuestion(BaseModel):
    """A question as shown to the candidate: never carries the correct index."""
    question_id: int
    stem: str
    options: List[str]

class ExistingAnswer(BaseModel):
    question_id: int
    selected_index: int

class AnsweredQuestion(BaseModel):
    question_id: int
    stem: str
    options: List[str]
    correct_index: int
    explanation: Optional[str] = None
    selected_index: Optional[int] = None
    is_correct: Optional[bool] = None
    answered_at: Optional[datetime] = None
    time_spent_seconds: Optional[int] = None

class SessionResults(BaseModel):
    session: AssessmentSession
    answers: List[AnsweredQuestion]


class ActiveSessionSummary(BaseModel):
    session_id: int
    user_id: int
    user_email: Optional[str] = None
    started_at: datetime
    time_remaining_seconds: int
    questions_answered: int
    total_questions: int
    tab_switch_count: int

class AssessmentResultsStats(BaseModel):
    avg_score: int
    pass_rate: int
    total_attempts: int

class AssessmentResults(BaseModel):
    sessions: List[AssessmentSession]
    stats: AssessmentResultsStats

class TabSwitchEntry(BaseModel):
    timestamp: str
    type: str

class SessionViolations(BaseModel):
    session_id: int
    user_id: int
    user_email: Optional[str] = None
    assessment_title: str
    tab_switch_count: int
    tab_switch_log: List[TabSwitchEntry]


class MySession(AssessmentSession):
    assessment_title: str
    total_questions: int

class AttemptSummary(BaseModel):
    id: int
    status: SessionStatusEnum
    score: Optional[int] = None
    passed: Optional[bool] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class MyAttempts(BaseModel):
    """A candidate's history on one assessment and whether they may go again."""
    attempts: List[AttemptSummary]
    attempts_used: int
    max_attempts: Optional[int] = None
    cooldown_minutes: Optional[int] = None
    can_retake: bool
    blocked_by: Optional[ErrorCode] = None
    cooldown_ends_at: Optional[datetime] = None
