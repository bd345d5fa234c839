from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from assessment_engine.core.constants import AssessmentStatusEnum, ErrorCode, SessionStatusEnum
from assessment_engine.domain.eligibility import access_code_matches, check_eligibility

NOW = datetime(2026, 3, 1, 12, 0, 0)


def make_assessment(**overrides):
    values = dict(
        status=AssessmentStatusEnum.PUBLISHED,
        access_code=None,
        start_date=None,
        end_date=None,
        max_attempts=None,
        cooldown_minutes=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)

def make_attempt(status=SessionStatusEnum.COMPLETED, completed_at=None):
    return SimpleNamespace(status=status, completed_at=completed_at)


def test_published_assessment_without_constraints_is_eligible():
    decision = check_eligibility(make_assessment(), [], NOW)
    assert decision.eligible
    assert decision.code is None

@pytest.mark.parametrize("status", [AssessmentStatusEnum.DRAFT, AssessmentStatusEnum.ARCHIVED])
def test_unpublished_assessment_is_rejected(status):
    decision = check_eligibility(make_assessment(status=status), [], NOW)
    assert not decision.eligible
    assert decision.code == ErrorCode.NOT_PUBLISHED

def test_not_published_wins_over_every_other_failure():
    assessment = make_assessment(
        status=AssessmentStatusEnum.DRAFT,
        access_code="secret",
        end_date=NOW - timedelta(days=1),
        max_attempts=1,
    )
    decision = check_eligibility(assessment, [make_attempt()], NOW)
    assert decision.code == ErrorCode.NOT_PUBLISHED

@pytest.mark.parametrize("supplied", [None, "", "wrong", "SECRET"])
def test_access_code_mismatch_is_rejected(supplied):
    decision = check_eligibility(make_assessment(access_code="secret"), [], NOW, access_code=supplied)
    assert decision.code == ErrorCode.INVALID_ACCESS_CODE

def test_matching_access_code_is_accepted():
    decision = check_eligibility(make_assessment(access_code="secret"), [], NOW, access_code="secret")
    assert decision.eligible

def test_access_code_checked_before_window():
    assessment = make_assessment(access_code="secret", start_date=NOW + timedelta(hours=1))
    decision = check_eligibility(assessment, [], NOW, access_code="nope")
    assert decision.code == ErrorCode.INVALID_ACCESS_CODE

def test_future_start_date_is_not_yet_open():
    decision = check_eligibility(make_assessment(start_date=NOW + timedelta(minutes=1)), [], NOW)
    assert decision.code == ErrorCode.NOT_YET_OPEN

def test_past_end_date_is_closed():
    decision = check_eligibility(make_assessment(end_date=NOW - timedelta(seconds=1)), [], NOW)
    assert decision.code == ErrorCode.CLOSED

def test_inside_window_is_eligible():
    assessment = make_assessment(start_date=NOW - timedelta(days=1), end_date=NOW + timedelta(days=1))
    assert check_eligibility(assessment, [], NOW).eligible

def test_max_attempts_counts_only_finished_attempts():
    assessment = make_assessment(max_attempts=2)
    attempts = [
        make_attempt(SessionStatusEnum.COMPLETED, NOW - timedelta(days=2)),
        make_attempt(SessionStatusEnum.IN_PROGRESS),
    ]
    assert check_eligibility(assessment, attempts, NOW).eligible

    attempts.append(make_attempt(SessionStatusEnum.TIMED_OUT, NOW - timedelta(days=1)))
    decision = check_eligibility(assessment, attempts, NOW)
    assert decision.code == ErrorCode.MAX_ATTEMPTS_REACHED
    assert decision.details == {"max_attempts": 2, "attempts_used": 2}

def test_cooldown_reports_ceiling_minutes_left():
    assessment = make_assessment(cooldown_minutes=30)
    attempts = [make_attempt(completed_at=NOW - timedelta(minutes=10, seconds=30))]
    decision = check_eligibility(assessment, attempts, NOW)
    assert decision.code == ErrorCode.COOLDOWN_ACTIVE
    assert decision.details == {"minutes_left": 20}

def test_cooldown_uses_most_recent_completion():
    assessment = make_assessment(cooldown_minutes=30)
    attempts = [
        make_attempt(completed_at=NOW - timedelta(days=3)),
        make_attempt(completed_at=NOW - timedelta(minutes=5)),
        make_attempt(SessionStatusEnum.IN_PROGRESS, completed_at=None),
    ]
    decision = check_eligibility(assessment, attempts, NOW)
    assert decision.code == ErrorCode.COOLDOWN_ACTIVE
    assert decision.details["minutes_left"] == 25

def test_cooldown_elapsed_is_eligible():
    assessment = make_assessment(cooldown_minutes=30)
    attempts = [make_attempt(completed_at=NOW - timedelta(minutes=31))]
    assert check_eligibility(assessment, attempts, NOW).eligible

def test_max_attempts_checked_before_cooldown():
    assessment = make_assessment(max_attempts=1, cooldown_minutes=30)
    attempts = [make_attempt(completed_at=NOW - timedelta(minutes=1))]
    assert check_eligibility(assessment, attempts, NOW).code == ErrorCode.MAX_ATTEMPTS_REACHED

def test_access_code_matches_handles_non_ascii():
    assert access_code_matches("clé-42", "clé-42")
    assert not access_code_matches("clé-42", "cle-42")
    assert not access_code_matches("code", None)
