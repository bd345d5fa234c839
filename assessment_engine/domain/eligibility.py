"""
Eligibility gate for starting a new assessment attempt.

Pure decision logic: callers load the assessment and the candidate's attempt
history, this module never touches the store.
"""
import hmac
import math
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Sequence

from pydantic import BaseModel

from assessment_engine.core.constants import AssessmentStatusEnum, ErrorCode, TERMINAL_SESSION_STATUSES
from assessment_engine.utils.clock import as_naive_utc


class EligibilityDecision(BaseModel):
    eligible: bool
    code: Optional[ErrorCode] = None
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def allow(cls) -> "EligibilityDecision":
        return cls(eligible=True)

    @classmethod
    def deny(cls, code: ErrorCode, message: str, details: Optional[Dict[str, Any]] = None) -> "EligibilityDecision":
        return cls(eligible=False, code=code, message=message, details=details)


def access_code_matches(expected: str, supplied: Optional[str]) -> bool:
    if supplied is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))


def count_finished_attempts(attempts: Sequence[Any]) -> int:
    return sum(1 for attempt in attempts if attempt.status in TERMINAL_SESSION_STATUSES)


def last_completed_at(attempts: Sequence[Any]) -> Optional[datetime]:
    completed = [as_naive_utc(attempt.completed_at) for attempt in attempts if attempt.completed_at is not None]
    return max(completed) if completed else None


def cooldown_ends_at(assessment: Any, attempts: Sequence[Any], now: datetime) -> Optional[datetime]:
    """When the running cooldown ends, or None if the candidate may retake now."""
    if not assessment.cooldown_minutes:
        return None
    completed_at = last_completed_at(attempts)
    if completed_at is None:
        return None
    available_at = completed_at + timedelta(minutes=assessment.cooldown_minutes)
    return available_at if as_naive_utc(now) < available_at else None


def check_eligibility(
    assessment: Any,
    attempts: Sequence[Any],
    now: datetime,
    access_code: Optional[str] = None,
    check_access_code: bool = True,
) -> EligibilityDecision:
    """
    Decide whether a candidate may start a new attempt.

    Checks run in a fixed order and the first failure wins: publication,
    access code, availability window, attempt limit, cooldown.

    :param assessment: anything exposing the assessment configuration fields
    :param attempts: every previous attempt of this candidate on this assessment
    :param now: server time, naive UTC
    :param access_code: code supplied by the candidate, if any
    :param check_access_code: False when previewing eligibility without a code
    """
    now = as_naive_utc(now)

    if assessment.status != AssessmentStatusEnum.PUBLISHED:
        return EligibilityDecision.deny(ErrorCode.NOT_PUBLISHED, "Assessment is not available.")

    if check_access_code and assessment.access_code and not access_code_matches(assessment.access_code, access_code):
        return EligibilityDecision.deny(ErrorCode.INVALID_ACCESS_CODE, "Invalid access code.")

    start_date = as_naive_utc(assessment.start_date)
    if start_date and now < start_date:
        return EligibilityDecision.deny(
            ErrorCode.NOT_YET_OPEN,
            "Assessment has not opened yet.",
            {"start_date": start_date.isoformat()},
        )

    end_date = as_naive_utc(assessment.end_date)
    if end_date and now > end_date:
        return EligibilityDecision.deny(ErrorCode.CLOSED, "Assessment has closed.")

    if assessment.max_attempts is not None:
        attempts_used = count_finished_attempts(attempts)
        if attempts_used >= assessment.max_attempts:
            return EligibilityDecision.deny(
                ErrorCode.MAX_ATTEMPTS_REACHED,
                "Maximum attempts reached.",
                {"max_attempts": assessment.max_attempts, "attempts_used": attempts_used},
            )

    available_at = cooldown_ends_at(assessment, attempts, now)
    if available_at is not None:
        minutes_left = math.ceil((available_at - now).total_seconds() / 60)
        return EligibilityDecision.deny(
            ErrorCode.COOLDOWN_ACTIVE,
            f"Please wait {minutes_left} minutes before retaking.",
            {"minutes_left": minutes_left},
        )

    return EligibilityDecision.allow()
