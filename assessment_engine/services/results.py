from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from assessment_engine.core.constants import AssessmentStatusEnum, ErrorCode, TERMINAL_SESSION_STATUSES
from assessment_engine.crud.assessment import assessment as crud_assessment
from assessment_engine.crud.assessment_answer import assessment_answer as crud_assessment_answer
from assessment_engine.crud.assessment_session import assessment_session as crud_assessment_session
from assessment_engine.crud.card import card as crud_card
from assessment_engine.domain.eligibility import check_eligibility, cooldown_ends_at, count_finished_attempts
from assessment_engine.domain.ranking import rank_score
from assessment_engine.domain.timing import seconds_remaining
from assessment_engine.schemas.assessment_session import (
    ActiveSessionSummary,
    AnsweredQuestion,
    AssessmentResults,
    AssessmentResultsStats,
    AssessmentSession,
    AttemptSummary,
    MyAttempts,
    MySession,
    PercentileResult,
    SessionResults,
    SessionViolations,
    TabSwitchEntry,
)
from assessment_engine.schemas.context import OrgUserContext
from assessment_engine.schemas.response import ActionResult
from assessment_engine.utils.clock import as_naive_utc, utcnow
from assessment_engine.utils.permission import PermissionHelper as permission_helper


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


class ResultsService:

    def _get_visible_session(self, db: Session, session_id: int, context: OrgUserContext):
        """The caller's own session, or any session of the org for creators and above."""
        if permission_helper.is_creator_or_above(context):
            return crud_assessment_session.get_for_org(db, id=session_id, org_id=context.org_id)
        session = crud_assessment_session.get_for_user(db, id=session_id, user_id=context.user_id)
        if not session or session.assessment.org_id != context.org_id:
            return None
        return session

    def get_session_percentile(self, db: Session, *, session_id: int, context: OrgUserContext) -> ActionResult:
        session = self._get_visible_session(db, session_id, context)
        if not session:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Session not found.")
        if session.score is None:
            return ActionResult.failure(ErrorCode.NOT_SCORED, "Session has not been scored yet.")

        scores = crud_assessment_session.get_finished_scores(db, assessment_id=session.assessment_id)
        ranking = rank_score(session.score, scores)
        return ActionResult.success(PercentileResult(
            percentile=ranking.percentile,
            rank=ranking.rank,
            total_sessions=ranking.total_sessions,
        ))

    def get_session_results(self, db: Session, *, session_id: int, context: OrgUserContext) -> ActionResult:
        session = self._get_visible_session(db, session_id, context)
        if not session:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Session not found.")
        if session.status not in TERMINAL_SESSION_STATUSES:
            return ActionResult.failure(ErrorCode.INVALID_STATE, "Results are available once the session has finished.")

        answers = {
            answer.question_id: answer
            for answer in crud_assessment_answer.get_all_by_session(db, session_id=session_id)
        }
        question_order = session.question_order or []
        cards = {card.id: card for card in crud_card.get_many(db, ids=question_order)}

        answered = []
        for question_id in question_order:
            card = cards.get(question_id)
            if card is None:
                continue
            answer = answers.get(question_id)
            answered.append(AnsweredQuestion(
                question_id=question_id,
                stem=card.stem,
                options=card.options,
                correct_index=card.correct_index,
                explanation=card.explanation,
                selected_index=answer.selected_index if answer else None,
                is_correct=answer.is_correct if answer else None,
                answered_at=answer.answered_at if answer else None,
                time_spent_seconds=answer.time_spent_seconds if answer else None,
            ))

        return ActionResult.success(SessionResults(
            session=AssessmentSession.model_validate(session),
            answers=answered,
        ))

    def get_active_sessions(
        self,
        db: Session,
        *,
        assessment_id: int,
        context: OrgUserContext,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        if not permission_helper.is_creator_or_above(context):
            return ActionResult.failure(ErrorCode.FORBIDDEN, "Insufficient permissions.")

        assessment = crud_assessment.get_for_org(db, id=assessment_id, org_id=context.org_id)
        if not assessment:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Assessment not found.")

        now = as_naive_utc(now) if now else utcnow()
        sessions = crud_assessment_session.get_active_by_assessment(db, assessment_id=assessment_id)
        answered_counts = crud_assessment_answer.count_answered_by_sessions(
            db, session_ids=[session.id for session in sessions]
        )

        return ActionResult.success([
            ActiveSessionSummary(
                session_id=session.id,
                user_id=session.user_id,
                user_email=session.user.email if session.user else None,
                started_at=session.started_at,
                time_remaining_seconds=seconds_remaining(session.started_at, assessment.time_limit_minutes, now),
                questions_answered=answered_counts.get(session.id, 0),
                total_questions=len(session.question_order or []),
                tab_switch_count=session.tab_switch_count or 0,
            )
            for session in sessions
        ])

    def get_assessment_results(self, db: Session, *, assessment_id: int, context: OrgUserContext) -> ActionResult:
        if not permission_helper.is_creator_or_above(context):
            return ActionResult.failure(ErrorCode.FORBIDDEN, "Insufficient permissions.")

        assessment = crud_assessment.get_for_org(db, id=assessment_id, org_id=context.org_id)
        if not assessment:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Assessment not found.")

        sessions = crud_assessment_session.get_all_by_assessment(db, assessment_id=assessment_id)
        finished = [
            session for session in sessions
            if session.status in TERMINAL_SESSION_STATUSES and session.score is not None
        ]
        total_attempts = len(finished)
        if total_attempts:
            avg_score = _round_half_up(sum(session.score for session in finished) / total_attempts)
            pass_rate = _round_half_up(sum(1 for session in finished if session.passed) * 100 / total_attempts)
        else:
            avg_score = 0
            pass_rate = 0

        return ActionResult.success(AssessmentResults(
            sessions=[AssessmentSession.model_validate(session) for session in sessions],
            stats=AssessmentResultsStats(avg_score=avg_score, pass_rate=pass_rate, total_attempts=total_attempts),
        ))

    def get_session_violations(self, db: Session, *, session_id: int, context: OrgUserContext) -> ActionResult:
        if not permission_helper.is_creator_or_above(context):
            return ActionResult.failure(ErrorCode.FORBIDDEN, "Insufficient permissions.")

        session = crud_assessment_session.get_for_org(db, id=session_id, org_id=context.org_id)
        if not session:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Session not found.")

        return ActionResult.success(SessionViolations(
            session_id=session.id,
            user_id=session.user_id,
            user_email=session.user.email if session.user else None,
            assessment_title=session.assessment.title,
            tab_switch_count=session.tab_switch_count or 0,
            tab_switch_log=[TabSwitchEntry(**entry) for entry in (session.tab_switch_log or [])],
        ))

    def get_my_sessions(self, db: Session, *, context: OrgUserContext, limit: int = 200) -> ActionResult:
        sessions = crud_assessment_session.get_by_user_in_org(
            db, user_id=context.user_id, org_id=context.org_id, limit=limit
        )
        return ActionResult.success([
            MySession(
                **AssessmentSession.model_validate(session).model_dump(),
                assessment_title=session.assessment.title,
                total_questions=len(session.question_order or []),
            )
            for session in sessions
        ])

    def get_my_attempts(
        self,
        db: Session,
        *,
        assessment_id: int,
        context: OrgUserContext,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        """The caller's attempts on one assessment, with the retake verdict the gate would give."""
        assessment = crud_assessment.get_for_org(db, id=assessment_id, org_id=context.org_id)
        if not assessment or (
            not permission_helper.is_creator_or_above(context)
            and assessment.status == AssessmentStatusEnum.DRAFT
        ):
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Assessment not found.")

        now = as_naive_utc(now) if now else utcnow()
        attempts = crud_assessment_session.get_attempt_history(
            db, assessment_id=assessment_id, user_id=context.user_id
        )
        # the access code is asked for at start, not here
        decision = check_eligibility(assessment, attempts, now, check_access_code=False)

        return ActionResult.success(MyAttempts(
            attempts=[
                AttemptSummary.model_validate(attempt)
                for attempt in sorted(attempts, key=lambda attempt: attempt.started_at, reverse=True)
            ],
            attempts_used=count_finished_attempts(attempts),
            max_attempts=assessment.max_attempts,
            cooldown_minutes=assessment.cooldown_minutes,
            can_retake=decision.eligible,
            blocked_by=decision.code,
            cooldown_ends_at=cooldown_ends_at(assessment, attempts, now),
        ))


results_service = ResultsService()
