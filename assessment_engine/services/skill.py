from sqlalchemy.orm import Session

from assessment_engine.crud.skill import employee_skill_score as crud_skill_score
from assessment_engine.schemas.context import OrgUserContext
from assessment_engine.schemas.response import ActionResult
from assessment_engine.schemas.skill import EmployeeSkillScore


class SkillService:
    def get_user_skill_scores(self, db: Session, *, context: OrgUserContext) -> ActionResult:
        scores = crud_skill_score.get_for_user(db, org_id=context.org_id, user_id=context.user_id)
        return ActionResult.success([EmployeeSkillScore.model_validate(score) for score in scores])


skill_service = SkillService()
