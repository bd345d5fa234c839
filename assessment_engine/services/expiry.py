import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from assessment_engine.core.config import settings
from assessment_engine.core.constants import SessionStatusEnum
from assessment_engine.crud.assessment_answer import assessment_answer as crud_assessment_answer
from assessment_engine.crud.assessment_session import assessment_session as crud_assessment_session
from assessment_engine.domain.scoring import score_answers
from assessment_engine.domain.timing import is_expired
from assessment_engine.schemas.assessment_session import ExpiryResult
from assessment_engine.schemas.response import ActionResult
from assessment_engine.utils.clock import as_naive_utc, utcnow

logger = logging.getLogger(__name__)


class ExpiryService:
    """
    Force-completes sessions whose time limit has run out.

    Every terminal write is conditional on the session still being in
    progress, so overlapping sweeps and a candidate completing at the same
    moment never double-finish a session.
    """

    def expire_stale_sessions(
        self,
        db: Session,
        *,
        org_id: int,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> ActionResult:
        now = as_naive_utc(now) if now else utcnow()
        limit = limit or settings.EXPIRY_SWEEP_BATCH_SIZE

        stale = [
            session for session in crud_assessment_session.get_stale_for_org(db, org_id=org_id, now=now, limit=limit)
            if is_expired(session.started_at, session.assessment.time_limit_minutes, now)
        ]
        if not stale:
            return ActionResult.success(ExpiryResult(expired_count=0))

        stale_ids = [session.id for session in stale]
        pass_scores = {session.id: session.assessment.pass_score for session in stale}
        correctness = crud_assessment_answer.get_correctness_by_sessions(db, session_ids=stale_ids)

        expired_count = 0
        for session_id in stale_ids:
            summary = score_answers(correctness.get(session_id, []), pass_scores[session_id])
            try:
                finalized = crud_assessment_session.finalize(
                    db,
                    session_id=session_id,
                    status=SessionStatusEnum.TIMED_OUT,
                    score=summary.score,
                    passed=summary.passed,
                    completed_at=now,
                    time_remaining_seconds=0,
                )
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to expire session {session_id}: {e}")
                continue

            if finalized:
                expired_count += 1
            else:
                logger.debug(f"Session {session_id} was finished by another writer before expiry")

        if expired_count:
            logger.info(f"Expired {expired_count} stale session(s) for org {org_id}")
        return ActionResult.success(ExpiryResult(expired_count=expired_count))

    def sweep_all_orgs(self, db: Session, *, now: Optional[datetime] = None) -> int:
        total = 0
        for org_id in crud_assessment_session.get_org_ids_with_in_progress(db):
            result = self.expire_stale_sessions(db, org_id=org_id, now=now)
            total += result.data.expired_count
        return total


expiry_service = ExpiryService()
