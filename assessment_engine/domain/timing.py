from datetime import datetime, timedelta

from assessment_engine.utils.clock import as_naive_utc


def session_deadline(started_at: datetime, time_limit_minutes: int) -> datetime:
    return as_naive_utc(started_at) + timedelta(minutes=time_limit_minutes)


def is_expired(started_at: datetime, time_limit_minutes: int, now: datetime) -> bool:
    # strictly past the deadline, the last second still belongs to the candidate
    return as_naive_utc(now) > session_deadline(started_at, time_limit_minutes)


def seconds_remaining(started_at: datetime, time_limit_minutes: int, now: datetime) -> int:
    remaining = (session_deadline(started_at, time_limit_minutes) - as_naive_utc(now)).total_seconds()
    return max(0, int(remaining))
