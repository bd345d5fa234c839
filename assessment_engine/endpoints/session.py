from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from assessment_engine.schemas.assessment_session import (
    AnswerResult,
    AssessmentSession,
    CompletionResult,
    ExistingAnswer,
    ExpiryResult,
    MySession,
    PercentileResult,
    SessionQuestion,
    SessionResults,
    SessionViolations,
    SubmitAnswerRequest,
)
from assessment_engine.schemas.context import OrgUserContext
from assessment_engine.schemas.response import APIResponse
from assessment_engine.services.assessment_session import assessment_session_service
from assessment_engine.services.expiry import expiry_service
from assessment_engine.services.results import results_service
from assessment_engine.utils import deps
from assessment_engine.utils.results import unwrap

router = APIRouter()

@router.post("/expire", response_model=APIResponse[ExpiryResult])
async def expire_stale_sessions(
    db: Session = Depends(deps.get_db),
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    result = unwrap(expiry_service.expire_stale_sessions(db, org_id=context.org_id))
    return APIResponse(message="Stale sessions expired", data=result)


@router.get("/me", response_model=APIResponse[List[MySession]])
async def get_my_sessions(
    db: Session = Depends(deps.get_db),
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    sessions = unwrap(results_service.get_my_sessions(db, context=context))
    return APIResponse(message="Sessions retrieved successfully", data=sessions)


@router.get("/{session_id}", response_model=APIResponse[AssessmentSession])
async def get_session(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    session = unwrap(assessment_session_service.get_session(db, session_id=session_id, context=context))
    return APIResponse(message="Session retrieved successfully", data=session)


@router.get("/{session_id}/questions", response_model=APIResponse[List[SessionQuestion]])
async def get_session_questions(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    questions = unwrap(assessment_session_service.get_session_questions(db, session_id=session_id, context=context))
    return APIResponse(message="Session questions retrieved successfully", data=questions)


@router.get("/{session_id}/answers", response_model=APIResponse[List[ExistingAnswer]])
async def get_existing_answers(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    answers = unwrap(assessment_session_service.get_existing_answers(db, session_id=session_id, context=context))
    return APIResponse(message="Answers retrieved successfully", data=answers)


@router.post("/{session_id}/answers", response_model=APIResponse[AnswerResult])
async def submit_answer(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    answer_in: SubmitAnswerRequest,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    result = unwrap(assessment_session_service.submit_answer(
        db, session_id=session_id, context=context, answer_in=answer_in
    ))
    return APIResponse(message="Answer recorded", data=result)


@router.post("/{session_id}/complete", response_model=APIResponse[CompletionResult])
async def complete_session(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    result = unwrap(assessment_session_service.complete_session(db, session_id=session_id, context=context))
    return APIResponse(message="Session completed", data=result)


@router.post("/{session_id}/tab-switch", response_model=APIResponse)
async def report_tab_switch(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    unwrap(assessment_session_service.report_tab_switch(db, session_id=session_id, context=context))
    return APIResponse(message="Tab switch recorded")


@router.get("/{session_id}/percentile", response_model=APIResponse[PercentileResult])
async def get_session_percentile(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    result = unwrap(results_service.get_session_percentile(db, session_id=session_id, context=context))
    return APIResponse(message="Percentile retrieved successfully", data=result)


@router.get("/{session_id}/results", response_model=APIResponse[SessionResults])
async def get_session_results(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    result = unwrap(results_service.get_session_results(db, session_id=session_id, context=context))
    return APIResponse(message="Session results retrieved successfully", data=result)


@router.get("/{session_id}/violations", response_model=APIResponse[SessionViolations])
async def get_session_violations(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    result = unwrap(results_service.get_session_violations(db, session_id=session_id, context=context))
    return APIResponse(message="Session violations retrieved successfully", data=result)
