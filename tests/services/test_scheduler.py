from datetime import timedelta

from sqlalchemy.orm import Session

from assessment_engine.core import scheduler as scheduler_module
from assessment_engine.core.constants import SessionStatusEnum
from assessment_engine.models.assessment_session import AssessmentSession
from assessment_engine.services.assessment_session import assessment_session_service
from assessment_engine.utils.clock import utcnow


def test_scheduler_stays_off_in_tests():
    scheduler_module.start_scheduler()
    assert not scheduler_module.scheduler.running

def test_sweep_job_times_out_stale_sessions(db_session: Session, published_assessment, candidate_context):
    session = assessment_session_service.start_session(
        db_session,
        assessment_id=published_assessment.id,
        context=candidate_context,
        now=utcnow() - timedelta(hours=1),
    ).data

    scheduler_module.sweep_expired_sessions()

    db_session.expire_all()
    stored = db_session.get(AssessmentSession, session.id)
    assert stored.status == SessionStatusEnum.TIMED_OUT
    assert stored.score == 0
