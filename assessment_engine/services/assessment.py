import logging
from typing import Optional

from sqlalchemy.orm import Session

from assessment_engine.core.constants import AssessmentStatusEnum, ErrorCode
from assessment_engine.crud.assessment import assessment as crud_assessment
from assessment_engine.crud.assessment_session import assessment_session as crud_assessment_session
from assessment_engine.crud.card import card as crud_card
from assessment_engine.crud.deck import deck as crud_deck
from assessment_engine.schemas.assessment import Assessment, AssessmentCreate, AssessmentUpdate
from assessment_engine.schemas.context import OrgUserContext
from assessment_engine.schemas.response import ActionResult
from assessment_engine.utils.clock import as_naive_utc
from assessment_engine.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)

_INSUFFICIENT_PERMISSIONS = "Insufficient permissions."


def _window_failure(start_date, end_date) -> Optional[ActionResult]:
    if start_date and end_date and end_date <= start_date:
        return ActionResult.failure(ErrorCode.VALIDATION_ERROR, "end_date must be after start_date.")
    return None


class AssessmentService:

    def _get_managed_assessment(self, db: Session, assessment_id: int, context: OrgUserContext):
        if not permission_helper.is_creator_or_above(context):
            return None, ActionResult.failure(ErrorCode.FORBIDDEN, _INSUFFICIENT_PERMISSIONS)
        db_assessment = crud_assessment.get_for_org(db, id=assessment_id, org_id=context.org_id)
        if not db_assessment:
            return None, ActionResult.failure(ErrorCode.NOT_FOUND, "Assessment not found.")
        return db_assessment, None

    def create_assessment(self, db: Session, *, assessment_in: AssessmentCreate, context: OrgUserContext) -> ActionResult:
        if not permission_helper.is_creator_or_above(context):
            return ActionResult.failure(ErrorCode.FORBIDDEN, _INSUFFICIENT_PERMISSIONS)

        if not crud_deck.get_for_org(db, id=assessment_in.deck_id, org_id=context.org_id):
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Deck not found.")

        data = assessment_in.model_dump()
        data["start_date"] = as_naive_utc(data["start_date"])
        data["end_date"] = as_naive_utc(data["end_date"])
        failure = _window_failure(data["start_date"], data["end_date"])
        if failure:
            return failure
        data["access_code"] = data["access_code"] or None
        data.update(org_id=context.org_id, created_by=context.user_id, status=AssessmentStatusEnum.DRAFT)

        new_assessment = crud_assessment.create(db, obj_in=data)
        logger.info(f"Assessment {new_assessment.id} created in org {context.org_id} by user {context.user_id}")
        return ActionResult.success(Assessment.model_validate(new_assessment))

    def update_assessment(
        self,
        db: Session,
        *,
        assessment_id: int,
        assessment_in: AssessmentUpdate,
        context: OrgUserContext,
    ) -> ActionResult:
        db_assessment, failure = self._get_managed_assessment(db, assessment_id, context)
        if failure:
            return failure
        if db_assessment.status != AssessmentStatusEnum.DRAFT:
            return ActionResult.failure(ErrorCode.INVALID_STATE, "Only draft assessments can be edited.")

        update_data = assessment_in.model_dump(exclude_unset=True)
        if "deck_id" in update_data and not crud_deck.get_for_org(db, id=update_data["deck_id"], org_id=context.org_id):
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Deck not found.")
        for field in ("start_date", "end_date"):
            if field in update_data:
                update_data[field] = as_naive_utc(update_data[field])
        if "access_code" in update_data:
            update_data["access_code"] = update_data["access_code"] or None

        failure = _window_failure(
            update_data.get("start_date", db_assessment.start_date),
            update_data.get("end_date", db_assessment.end_date),
        )
        if failure:
            return failure

        updated = crud_assessment.update(db, db_obj=db_assessment, obj_in=update_data)
        return ActionResult.success(Assessment.model_validate(updated))

    def publish_assessment(self, db: Session, *, assessment_id: int, context: OrgUserContext) -> ActionResult:
        db_assessment, failure = self._get_managed_assessment(db, assessment_id, context)
        if failure:
            return failure
        if db_assessment.status != AssessmentStatusEnum.DRAFT:
            return ActionResult.failure(ErrorCode.INVALID_STATE, "Only draft assessments can be published.")

        available = crud_card.count_by_deck(db, deck_id=db_assessment.deck_id)
        if available == 0:
            return ActionResult.failure(ErrorCode.NO_QUESTIONS_AVAILABLE, "The source deck has no questions.")
        if available < db_assessment.question_count:
            logger.warning(
                f"Assessment {assessment_id} asks for {db_assessment.question_count} questions "
                f"but its deck holds {available}"
            )

        published = crud_assessment.update(db, db_obj=db_assessment, obj_in={"status": AssessmentStatusEnum.PUBLISHED})
        logger.info(f"Assessment {assessment_id} published by user {context.user_id}")
        return ActionResult.success(Assessment.model_validate(published))

    def unpublish_assessment(self, db: Session, *, assessment_id: int, context: OrgUserContext) -> ActionResult:
        """Revert a published assessment to draft while nobody is mid-attempt."""
        db_assessment, failure = self._get_managed_assessment(db, assessment_id, context)
        if failure:
            return failure
        if db_assessment.status != AssessmentStatusEnum.PUBLISHED:
            return ActionResult.failure(ErrorCode.INVALID_STATE, "Only published assessments can be reverted to draft.")
        if crud_assessment_session.has_in_progress_for_assessment(db, assessment_id=assessment_id):
            return ActionResult.failure(ErrorCode.INVALID_STATE, "Cannot revert while sessions are in progress.")

        reverted = crud_assessment.update(db, db_obj=db_assessment, obj_in={"status": AssessmentStatusEnum.DRAFT})
        logger.info(f"Assessment {assessment_id} reverted to draft by user {context.user_id}")
        return ActionResult.success(Assessment.model_validate(reverted))

    def archive_assessment(self, db: Session, *, assessment_id: int, context: OrgUserContext) -> ActionResult:
        db_assessment, failure = self._get_managed_assessment(db, assessment_id, context)
        if failure:
            return failure
        if db_assessment.status == AssessmentStatusEnum.ARCHIVED:
            return ActionResult.failure(ErrorCode.INVALID_STATE, "Assessment is already archived.")

        archived = crud_assessment.update(db, db_obj=db_assessment, obj_in={"status": AssessmentStatusEnum.ARCHIVED})
        logger.info(f"Assessment {assessment_id} archived by user {context.user_id}")
        return ActionResult.success(Assessment.model_validate(archived))

    def get_assessment(self, db: Session, *, assessment_id: int, context: OrgUserContext) -> ActionResult:
        db_assessment = crud_assessment.get_for_org(db, id=assessment_id, org_id=context.org_id)
        # candidates only ever see what they could take
        if not db_assessment or (
            not permission_helper.is_creator_or_above(context)
            and db_assessment.status != AssessmentStatusEnum.PUBLISHED
        ):
            return ActionResult.failure(ErrorCode.NOT_FOUND, "Assessment not found.")
        return ActionResult.success(Assessment.model_validate(db_assessment))

    def list_assessments(
        self,
        db: Session,
        *,
        context: OrgUserContext,
        status: Optional[AssessmentStatusEnum] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> ActionResult:
        if not permission_helper.is_creator_or_above(context):
            status = AssessmentStatusEnum.PUBLISHED
        assessments = crud_assessment.get_multi_by_org(db, org_id=context.org_id, status=status, skip=skip, limit=limit)
        return ActionResult.success([Assessment.model_validate(a) for a in assessments])


assessment_service = AssessmentService()
