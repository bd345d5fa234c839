from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from assessment_engine.schemas.context import OrgUserContext
from assessment_engine.schemas.response import APIResponse
from assessment_engine.schemas.skill import EmployeeSkillScore
from assessment_engine.services.skill import skill_service
from assessment_engine.utils import deps
from assessment_engine.utils.results import unwrap

router = APIRouter()

@router.get("/me/scores", response_model=APIResponse[List[EmployeeSkillScore]])
async def get_my_skill_scores(
    db: Session = Depends(deps.get_db),
    context: OrgUserContext = Depends(deps.get_current_user_with_context)
):
    scores = unwrap(skill_service.get_user_skill_scores(db, context=context))
    return APIResponse(message="Skill scores retrieved successfully", data=scores)
