import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from assessment_engine.core.constants import (
    ASSESSMENT_SESSION_COMPLETED,
    ErrorCode,
    SessionStatusEnum,
    TabEventTypeEnum,
)
from assessment_engine.crud.assessment import assessment as crud_assessment
from assessment_engine.crud.assessment_answer import assessment_answer as crud_assessment_answer
from assessment_engine.crud.assessment_session import assessment_session as crud_assessment_session
from assessment_engine.crud.card import card as crud_card
from assessment_engine.domain.eligibility import check_eligibility
from assessment_engine.domain.scoring import score_answers
from assessment_engine.domain.selection import select_questions
from assessment_engine.models.assessment_session import AssessmentSession as AssessmentSessionModel
from assessment_engine.schemas.assessment_session import (
    AnswerResult,
    AssessmentSession,
    CompletionResult,
    ExistingAnswer,
    SessionQuestion,
    SubmitAnswerRequest,
)
from assessment_engine.schemas.context import OrgUserContext
from assessment_engine.schemas.response import ActionResult
from assessment_engine.utils.clock import as_naive_utc, utcnow
from assessment_engine.utils.events import event_bus

logger = logging.getLogger(__name__)

_TAB_SWITCH_WRITE_ATTEMPTS = 3


def _resolve_now(now: Optional[datetime]) -> datetime:
    return as_naive_utc(now) if now else utcnow()


class AssessmentSessionService:
    """
    Lifecycle of a single candidate attempt: start, answer, complete.

    Every operation takes the caller's context explicitly and reports expected
    failures as an ``ActionResult``. Store errors roll the unit of work back
    and propagate.
    """

    def _get_own_session(self, db: Session, session_id: int, context: OrgUserContext) -> Optional[AssessmentSessionModel]:
        session = crud_assessment_session.get_for_user(db, id=session_id, user_id=context.user_id)
        if not session or session.assessment.org_id != context.org_id:
            return None
        return session

    def start_session(
        self,
        db: Session,
        *,
        assessment_id: int,
        context: OrgUserContext,
        access_code: Optional[str] = None,
        ip_address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        now = _resolve_now(now)

        assessment = crud_assessment.get_for_org(db, id=assessment_id, org_id=context.org_id)
        if not assessment:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Assessment not found.")

        attempts = crud_assessment_session.get_attempt_history(
            db, assessment_id=assessment_id, user_id=context.user_id
        )
        decision = check_eligibility(assessment, attempts, now, access_code=access_code)
        if not decision.eligible:
            return ActionResult.failure(decision.code, decision.message, decision.details)

        existing = crud_assessment_session.get_in_progress(db, assessment_id=assessment_id, user_id=context.user_id)
        if existing:
            return ActionResult.success(AssessmentSession.model_validate(existing))

        question_ids = select_questions(
            crud_card.get_ids_by_deck(db, deck_id=assessment.deck_id),
            assessment.question_count,
            assessment.shuffle_questions,
        )
        if not question_ids:
            return ActionResult.failure(ErrorCode.NO_QUESTIONS_AVAILABLE, "No questions available for this assessment.")

        try:
            new_session = crud_assessment_session.create(
                db,
                obj_in={
                    "assessment_id": assessment_id,
                    "user_id": context.user_id,
                    "question_order": question_ids,
                    "status": SessionStatusEnum.IN_PROGRESS,
                    "started_at": now,
                    "time_remaining_seconds": assessment.time_limit_minutes * 60,
                    "ip_address": ip_address,
                    "tab_switch_count": 0,
                    "tab_switch_log": [],
                },
                commit=False,
            )
            crud_assessment_answer.create_placeholders(db, session_id=new_session.id, question_ids=question_ids)
            db.commit()
        except IntegrityError:
            # A concurrent start won the partial unique index
            db.rollback()
            winner = crud_assessment_session.get_in_progress(db, assessment_id=assessment_id, user_id=context.user_id)
            if winner is None:
                raise
            logger.info(f"Concurrent start for assessment {assessment_id} by user {context.user_id}, returning session {winner.id}")
            return ActionResult.success(AssessmentSession.model_validate(winner))
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(new_session)
        logger.info(
            f"Session {new_session.id} started for assessment {assessment_id} by user {context.user_id} "
            f"with {len(question_ids)} questions"
        )
        return ActionResult.success(AssessmentSession.model_validate(new_session))

    def submit_answer(
        self,
        db: Session,
        *,
        session_id: int,
        context: OrgUserContext,
        answer_in: SubmitAnswerRequest,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        now = _resolve_now(now)

        session = self._get_own_session(db, session_id, context)
        if not session:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Session not found.")
        if session.status != SessionStatusEnum.IN_PROGRESS:
            return ActionResult.failure(ErrorCode.ALREADY_COMPLETED, "Session is already completed.")
        if answer_in.question_id not in (session.question_order or []):
            return ActionResult.failure(ErrorCode.QUESTION_NOT_IN_SESSION, "Question is not part of this session.")

        card = crud_card.get(db, id=answer_in.question_id)
        if not card:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Question not found.")

        is_correct = answer_in.selected_index == card.correct_index
        time_spent = None
        if answer_in.time_spent_seconds is not None:
            time_spent = int(answer_in.time_spent_seconds + 0.5)

        try:
            recorded = crud_assessment_answer.record_answer(
                db,
                session_id=session_id,
                question_id=answer_in.question_id,
                selected_index=answer_in.selected_index,
                is_correct=is_correct,
                answered_at=now,
                time_spent_seconds=time_spent,
            )
            if not recorded:
                db.rollback()
                return ActionResult.failure(ErrorCode.ALREADY_COMPLETED, "Session is already completed.")

            if answer_in.time_remaining_seconds is not None and answer_in.time_remaining_seconds >= 0:
                crud_assessment_session.update_time_remaining(
                    db, session_id=session_id, seconds=answer_in.time_remaining_seconds
                )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        return ActionResult.success(AnswerResult(is_correct=is_correct))

    def complete_session(
        self,
        db: Session,
        *,
        session_id: int,
        context: OrgUserContext,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        now = _resolve_now(now)

        session = self._get_own_session(db, session_id, context)
        if not session:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Session not found.")
        if session.status != SessionStatusEnum.IN_PROGRESS:
            return ActionResult.failure(ErrorCode.ALREADY_COMPLETED, "Session is already completed.")

        assessment = session.assessment
        correctness = crud_assessment_answer.get_correctness_by_sessions(db, session_ids=[session_id])
        summary = score_answers(correctness.get(session_id, []), assessment.pass_score)

        try:
            finalized = crud_assessment_session.finalize(
                db,
                session_id=session_id,
                status=SessionStatusEnum.COMPLETED,
                score=summary.score,
                passed=summary.passed,
                completed_at=now,
            )
            if not finalized:
                db.rollback()
                return ActionResult.failure(ErrorCode.ALREADY_COMPLETED, "Session is already completed.")
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        logger.info(
            f"Session {session_id} completed by user {context.user_id}: "
            f"{summary.correct}/{summary.total} correct, score {summary.score}, passed={summary.passed}"
        )
        event_bus.publish_nowait(ASSESSMENT_SESSION_COMPLETED, {
            "session_id": session_id,
            "assessment_id": assessment.id,
            "org_id": assessment.org_id,
            "deck_id": assessment.deck_id,
            "user_id": context.user_id,
            "score": summary.score,
            "passed": summary.passed,
            "completed_at": now.isoformat(),
        })

        return ActionResult.success(CompletionResult(
            score=summary.score,
            passed=summary.passed,
            total=summary.total,
            correct=summary.correct,
        ))

    def get_session(self, db: Session, *, session_id: int, context: OrgUserContext) -> ActionResult:
        session = self._get_own_session(db, session_id, context)
        if not session:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Session not found.")
        return ActionResult.success(AssessmentSession.model_validate(session))

    def get_session_questions(self, db: Session, *, session_id: int, context: OrgUserContext) -> ActionResult:
        """Questions in their frozen order, without correct answers."""
        session = self._get_own_session(db, session_id, context)
        if not session:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Session not found.")

        question_order = session.question_order or []
        cards = {card.id: card for card in crud_card.get_many(db, ids=question_order)}
        questions = [
            SessionQuestion(question_id=card_id, stem=cards[card_id].stem, options=cards[card_id].options)
            for card_id in question_order
            if card_id in cards
        ]
        return ActionResult.success(questions)

    def get_existing_answers(self, db: Session, *, session_id: int, context: OrgUserContext) -> ActionResult:
        session = self._get_own_session(db, session_id, context)
        if not session:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Session not found.")

        answers = crud_assessment_answer.get_answered_by_session(db, session_id=session_id)
        return ActionResult.success([
            ExistingAnswer(question_id=answer.question_id, selected_index=answer.selected_index)
            for answer in answers
        ])

    def report_tab_switch(
        self,
        db: Session,
        *,
        session_id: int,
        context: OrgUserContext,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        now = _resolve_now(now)

        session = self._get_own_session(db, session_id, context)
        if not session:
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Session not found.")
        if session.status != SessionStatusEnum.IN_PROGRESS:
            return ActionResult.failure(ErrorCode.ALREADY_COMPLETED, "Session is already completed.")

        entry = {"timestamp": now.isoformat(), "type": TabEventTypeEnum.TAB_HIDDEN.value}

        # a concurrent report moves the count, re-read and append again
        for _ in range(_TAB_SWITCH_WRITE_ATTEMPTS):
            tab_switch_log = list(session.tab_switch_log or []) + [entry]
            try:
                recorded = crud_assessment_session.record_tab_switch(
                    db,
                    session_id=session_id,
                    expected_count=session.tab_switch_count or 0,
                    tab_switch_log=tab_switch_log,
                )
                if recorded:
                    db.commit()
                    logger.info(f"Tab switch reported for session {session_id} ({len(tab_switch_log)} total)")
                    return ActionResult.success()
                db.rollback()
            except SQLAlchemyError:
                db.rollback()
                raise

            session = crud_assessment_session.get(db, id=session_id)
            if session.status != SessionStatusEnum.IN_PROGRESS:
                return ActionResult.failure(ErrorCode.ALREADY_COMPLETED, "Session is already completed.")

        logger.warning(f"Tab switch for session {session_id} lost {_TAB_SWITCH_WRITE_ATTEMPTS} write races")
        return ActionResult.failure(ErrorCode.INVALID_STATE, "Tab switch could not be recorded, please retry.")


assessment_session_service = AssessmentSessionService()
