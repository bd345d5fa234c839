from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from assessment_engine.core.constants import AssessmentStatusEnum
from assessment_engine.schemas.assessment import Assessment, AssessmentCreate, AssessmentUpdate
from assessment_engine.schemas.assessment_session import (
    ActiveSessionSummary,
    AssessmentResults,
    AssessmentSession,
    MyAttempts,
    StartSessionRequest,
)
from assessment_engine.schemas.context import OrgUserContext
from assessment_engine.schemas.response import APIResponse
from assessment_engine.services.assessment import assessment_service
from assessment_engine.services.assessment_session import assessment_session_service
from assessment_engine.services.results import results_service
from assessment_engine.utils import deps
from assessment_engine.utils.results import unwrap

router = APIRouter()

@router.post("/", response_model=APIResponse[Assessment], status_code=status.HTTP_201_CREATED)
async def create_assessment(
    *,
    db: Session = Depends(deps.get_transactional_db),
    assessment_in: AssessmentCreate,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    new_assessment = unwrap(assessment_service.create_assessment(db, assessment_in=assessment_in, context=context))
    return APIResponse(message="Assessment created successfully", data=new_assessment)


@router.get("/", response_model=APIResponse[List[Assessment]])
async def list_assessments(
    db: Session = Depends(deps.get_db),
    context: OrgUserContext = Depends(deps.get_current_user_with_context),
    skip: int = 0,
    limit: int = Query(100, le=500),
    status: Optional[AssessmentStatusEnum] = Query(None)
):
    assessments = unwrap(assessment_service.list_assessments(db, context=context, status=status, skip=skip, limit=limit))
    return APIResponse(message="Assessments retrieved successfully", data=assessments)


@router.get("/{assessment_id}", response_model=APIResponse[Assessment])
async def get_assessment(
    *,
    db: Session = Depends(deps.get_db),
    assessment_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    found = unwrap(assessment_service.get_assessment(db, assessment_id=assessment_id, context=context))
    return APIResponse(message="Assessment retrieved successfully", data=found)


@router.put("/{assessment_id}", response_model=APIResponse[Assessment])
async def update_assessment(
    *,
    db: Session = Depends(deps.get_transactional_db),
    assessment_id: int,
    assessment_in: AssessmentUpdate,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    updated = unwrap(assessment_service.update_assessment(
        db, assessment_id=assessment_id, assessment_in=assessment_in, context=context
    ))
    return APIResponse(message="Assessment updated successfully", data=updated)


@router.post("/{assessment_id}/publish", response_model=APIResponse[Assessment])
async def publish_assessment(
    *,
    db: Session = Depends(deps.get_transactional_db),
    assessment_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    published = unwrap(assessment_service.publish_assessment(db, assessment_id=assessment_id, context=context))
    return APIResponse(message="Assessment published successfully", data=published)


@router.post("/{assessment_id}/unpublish", response_model=APIResponse[Assessment])
async def unpublish_assessment(
    *,
    db: Session = Depends(deps.get_transactional_db),
    assessment_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    reverted = unwrap(assessment_service.unpublish_assessment(db, assessment_id=assessment_id, context=context))
    return APIResponse(message="Assessment reverted to draft", data=reverted)


@router.post("/{assessment_id}/archive", response_model=APIResponse[Assessment])
async def archive_assessment(
    *,
    db: Session = Depends(deps.get_transactional_db),
    assessment_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    archived = unwrap(assessment_service.archive_assessment(db, assessment_id=assessment_id, context=context))
    return APIResponse(message="Assessment archived successfully", data=archived)


@router.post("/{assessment_id}/sessions", response_model=APIResponse[AssessmentSession], status_code=status.HTTP_201_CREATED)
async def start_session(
    *,
    db: Session = Depends(deps.get_db),
    request: Request,
    assessment_id: int,
    session_in: Optional[StartSessionRequest] = None,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    session = unwrap(assessment_session_service.start_session(
        db,
        assessment_id=assessment_id,
        context=context,
        access_code=session_in.access_code if session_in else None,
        ip_address=deps.get_client_ip(request),
    ))
    return APIResponse(message="Session started successfully", data=session)


@router.get("/{assessment_id}/results", response_model=APIResponse[AssessmentResults])
async def get_assessment_results(
    *,
    db: Session = Depends(deps.get_db),
    assessment_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    results = unwrap(results_service.get_assessment_results(db, assessment_id=assessment_id, context=context))
    return APIResponse(message="Assessment results retrieved successfully", data=results)


@router.get("/{assessment_id}/active-sessions", response_model=APIResponse[List[ActiveSessionSummary]])
async def get_active_sessions(
    *,
    db: Session = Depends(deps.get_db),
    assessment_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    sessions = unwrap(results_service.get_active_sessions(db, assessment_id=assessment_id, context=context))
    return APIResponse(message="Active sessions retrieved successfully", data=sessions)


@router.get("/{assessment_id}/my-attempts", response_model=APIResponse[MyAttempts])
async def get_my_attempts(
    *,
    db: Session = Depends(deps.get_db),
    assessment_id: int,
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    attempts = unwrap(results_service.get_my_attempts(db, assessment_id=assessment_id, context=context))
    return APIResponse(message="Attempts retrieved successfully", data=attempts)
