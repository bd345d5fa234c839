from typing import List, Optional
from sqlalchemy.orm import Session

from assessment_engine.core.constants import AssessmentStatusEnum
from assessment_engine.crud.base import CRUDBase
from assessment_engine.models.assessment import Assessment
from assessment_engine.schemas.assessment import AssessmentCreate, AssessmentUpdate

class CRUDAssessment(CRUDBase[Assessment, AssessmentCreate, AssessmentUpdate]):

    def get_for_org(self, db: Session, *, id: int, org_id: int) -> Optional[Assessment]:
        return (
            db.query(Assessment)
            .filter(Assessment.id == id)
            .filter(Assessment.org_id == org_id)
            .first()
        )

    def get_multi_by_org(
        self,
        db: Session,
        *,
        org_id: int,
        status: Optional[AssessmentStatusEnum] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Assessment]:
        query = db.query(Assessment).filter(Assessment.org_id == org_id)
        if status:
            query = query.filter(Assessment.status == status)
        return query.order_by(Assessment.created_at.desc(), Assessment.id.desc()).offset(skip).limit(limit).all()

assessment = CRUDAssessment(Assessment)
