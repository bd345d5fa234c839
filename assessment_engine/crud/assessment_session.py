from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, selectinload

from assessment_engine.core.constants import SessionStatusEnum, TERMINAL_SESSION_STATUSES
from assessment_engine.crud.base import CRUDBase
from assessment_engine.models.assessment import Assessment
from assessment_engine.models.assessment_session import AssessmentSession
from assessment_engine.schemas.assessment_session import AssessmentSessionCreate

class CRUDAssessmentSession(CRUDBase[AssessmentSession, AssessmentSessionCreate, AssessmentSessionCreate]):

    def _query_with_assessment(self, db: Session):
        return db.query(AssessmentSession).options(selectinload(AssessmentSession.assessment))

    def get(self, db: Session, id: int) -> Optional[AssessmentSession]:
        return self._query_with_assessment(db).filter(AssessmentSession.id == id).first()

    def get_for_user(self, db: Session, *, id: int, user_id: int) -> Optional[AssessmentSession]:
        return (
            self._query_with_assessment(db)
            .filter(AssessmentSession.id == id)
            .filter(AssessmentSession.user_id == user_id)
            .first()
        )

    def get_for_org(self, db: Session, *, id: int, org_id: int) -> Optional[AssessmentSession]:
        return (
            self._query_with_assessment(db)
            .join(Assessment, AssessmentSession.assessment_id == Assessment.id)
            .filter(AssessmentSession.id == id)
            .filter(Assessment.org_id == org_id)
            .first()
        )

    def get_in_progress(self, db: Session, *, assessment_id: int, user_id: int) -> Optional[AssessmentSession]:
        return (
            self._query_with_assessment(db)
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.user_id == user_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .first()
        )

    def get_attempt_history(self, db: Session, *, assessment_id: int, user_id: int) -> List[AssessmentSession]:
        """Every attempt by the user, most recently completed first, unfinished last."""
        return (
            db.query(AssessmentSession)
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.user_id == user_id)
            .order_by(
                AssessmentSession.completed_at.is_(None),
                AssessmentSession.completed_at.desc(),
                AssessmentSession.started_at.desc(),
            )
            .all()
        )

    def get_stale_for_org(self, db: Session, *, org_id: int, now: datetime, limit: int = 1000) -> List[AssessmentSession]:
        """
        In-progress sessions of the org whose deadline has passed, oldest first.

        The deadline is ``started_at + time_limit_minutes``. It is turned into
        one ``started_at`` cutoff per distinct time limit so the comparison
        stays portable across dialects.
        """
        time_limits = [
            row[0]
            for row in (
                db.query(Assessment.time_limit_minutes)
                .join(AssessmentSession, AssessmentSession.assessment_id == Assessment.id)
                .filter(Assessment.org_id == org_id)
                .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
                .distinct()
                .all()
            )
        ]
        if not time_limits:
            return []

        deadline_passed = or_(*[
            and_(
                Assessment.time_limit_minutes == minutes,
                AssessmentSession.started_at < now - timedelta(minutes=minutes),
            )
            for minutes in time_limits
        ])
        return (
            self._query_with_assessment(db)
            .join(Assessment, AssessmentSession.assessment_id == Assessment.id)
            .filter(Assessment.org_id == org_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .filter(deadline_passed)
            .order_by(AssessmentSession.started_at.asc())
            .limit(limit)
            .all()
        )

    def get_org_ids_with_in_progress(self, db: Session) -> List[int]:
        result = (
            db.query(Assessment.org_id)
            .join(AssessmentSession, AssessmentSession.assessment_id == Assessment.id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .distinct()
            .all()
        )
        return [row[0] for row in result]

    def has_in_progress_for_assessment(self, db: Session, *, assessment_id: int) -> bool:
        return (
            db.query(AssessmentSession.id)
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .first()
        ) is not None

    def get_by_user_in_org(self, db: Session, *, user_id: int, org_id: int, limit: int = 200) -> List[AssessmentSession]:
        return (
            self._query_with_assessment(db)
            .join(Assessment, AssessmentSession.assessment_id == Assessment.id)
            .filter(AssessmentSession.user_id == user_id)
            .filter(Assessment.org_id == org_id)
            .order_by(AssessmentSession.started_at.desc())
            .limit(limit)
            .all()
        )

    def get_active_by_assessment(self, db: Session, *, assessment_id: int) -> List[AssessmentSession]:
        return (
            db.query(AssessmentSession)
            .options(selectinload(AssessmentSession.user))
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .order_by(AssessmentSession.started_at.asc())
            .all()
        )

    def get_all_by_assessment(self, db: Session, *, assessment_id: int, limit: int = 1000) -> List[AssessmentSession]:
        return (
            db.query(AssessmentSession)
            .filter(AssessmentSession.assessment_id == assessment_id)
            .order_by(AssessmentSession.completed_at.is_(None), AssessmentSession.completed_at.desc())
            .limit(limit)
            .all()
        )

    def get_finished_scores(self, db: Session, *, assessment_id: int) -> List[int]:
        result = (
            db.query(AssessmentSession.score)
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.status.in_(TERMINAL_SESSION_STATUSES))
            .filter(AssessmentSession.score.isnot(None))
            .all()
        )
        return [row[0] for row in result]

    def finalize(
        self,
        db: Session,
        *,
        session_id: int,
        status: SessionStatusEnum,
        score: int,
        passed: bool,
        completed_at: datetime,
        time_remaining_seconds: Optional[int] = None,
    ) -> bool:
        """
        Terminal write as one conditional UPDATE.

        Status, score and verdict land together, and only if the row is still
        in progress. Returns False when another writer finished it first.
        """
        values: Dict = {
            AssessmentSession.status: status,
            AssessmentSession.score: score,
            AssessmentSession.passed: passed,
            AssessmentSession.completed_at: completed_at,
        }
        if time_remaining_seconds is not None:
            values[AssessmentSession.time_remaining_seconds] = time_remaining_seconds
        updated = (
            db.query(AssessmentSession)
            .filter(AssessmentSession.id == session_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .update(values, synchronize_session=False)
        )
        return updated == 1

    def update_time_remaining(self, db: Session, *, session_id: int, seconds: int) -> bool:
        updated = (
            db.query(AssessmentSession)
            .filter(AssessmentSession.id == session_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .update({AssessmentSession.time_remaining_seconds: seconds}, synchronize_session=False)
        )
        return updated == 1

    def record_tab_switch(
        self, db: Session, *, session_id: int, expected_count: int, tab_switch_log: List[Dict]
    ) -> bool:
        """Replace the log only if no other report landed since ``expected_count`` was read."""
        updated = (
            db.query(AssessmentSession)
            .filter(AssessmentSession.id == session_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .filter(func.coalesce(AssessmentSession.tab_switch_count, 0) == expected_count)
            .update(
                {
                    AssessmentSession.tab_switch_count: func.coalesce(AssessmentSession.tab_switch_count, 0) + 1,
                    AssessmentSession.tab_switch_log: tab_switch_log,
                },
                synchronize_session=False,
            )
        )
        return updated == 1


assessment_session = CRUDAssessmentSession(AssessmentSession)
