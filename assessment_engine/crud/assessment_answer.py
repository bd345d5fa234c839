from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from assessment_engine.core.constants import SessionStatusEnum
from assessment_engine.crud.base import CRUDBase
from assessment_engine.models.assessment_answer import AssessmentAnswer
from assessment_engine.models.assessment_session import AssessmentSession
from assessment_engine.schemas.assessment_answer import AssessmentAnswerCreate, AssessmentAnswerUpdate

class CRUDAssessmentAnswer(CRUDBase[AssessmentAnswer, AssessmentAnswerCreate, AssessmentAnswerUpdate]):

    def create_placeholders(self, db: Session, *, session_id: int, question_ids: Sequence[int]) -> List[AssessmentAnswer]:
        rows = [AssessmentAnswer(session_id=session_id, question_id=question_id) for question_id in question_ids]
        db.add_all(rows)
        db.flush()
        return rows

    def get_all_by_session(self, db: Session, *, session_id: int) -> List[AssessmentAnswer]:
        return (
            db.query(AssessmentAnswer)
            .filter(AssessmentAnswer.session_id == session_id)
            .order_by(AssessmentAnswer.id)
            .all()
        )

    def get_answered_by_session(self, db: Session, *, session_id: int) -> List[AssessmentAnswer]:
        return (
            db.query(AssessmentAnswer)
            .filter(AssessmentAnswer.session_id == session_id)
            .filter(AssessmentAnswer.selected_index.isnot(None))
            .order_by(AssessmentAnswer.id)
            .all()
        )

    def get_correctness_by_sessions(self, db: Session, *, session_ids: Sequence[int]) -> Dict[int, List[Optional[bool]]]:
        if not session_ids:
            return {}
        rows = (
            db.query(AssessmentAnswer.session_id, AssessmentAnswer.is_correct)
            .filter(AssessmentAnswer.session_id.in_(session_ids))
            .all()
        )
        grouped: Dict[int, List[Optional[bool]]] = defaultdict(list)
        for session_id, is_correct in rows:
            grouped[session_id].append(is_correct)
        return dict(grouped)

    def count_answered_by_sessions(self, db: Session, *, session_ids: Sequence[int]) -> Dict[int, int]:
        if not session_ids:
            return {}
        rows = (
            db.query(AssessmentAnswer.session_id, func.count(AssessmentAnswer.id))
            .filter(AssessmentAnswer.session_id.in_(session_ids))
            .filter(AssessmentAnswer.selected_index.isnot(None))
            .group_by(AssessmentAnswer.session_id)
            .all()
        )
        return {session_id: count for session_id, count in rows}

    def record_answer(
        self,
        db: Session,
        *,
        session_id: int,
        question_id: int,
        selected_index: int,
        is_correct: bool,
        answered_at: datetime,
        time_spent_seconds: Optional[int] = None,
    ) -> bool:
        """Overwrite the placeholder row, provided its session is still in progress."""
        values = {
            AssessmentAnswer.selected_index: selected_index,
            AssessmentAnswer.is_correct: is_correct,
            AssessmentAnswer.answered_at: answered_at,
        }
        if time_spent_seconds is not None:
            values[AssessmentAnswer.time_spent_seconds] = time_spent_seconds

        active_session = (
            select(AssessmentSession.id)
            .where(AssessmentSession.id == session_id)
            .where(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
        )
        updated = (
            db.query(AssessmentAnswer)
            .filter(AssessmentAnswer.session_id == session_id)
            .filter(AssessmentAnswer.question_id == question_id)
            .filter(AssessmentAnswer.session_id.in_(active_session))
            .update(values, synchronize_session=False)
        )
        return updated == 1


assessment_answer = CRUDAssessmentAnswer(AssessmentAnswer)
