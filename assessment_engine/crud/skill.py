from typing import Dict, List, Sequence
from sqlalchemy.orm import Session

from assessment_engine.crud.base import CRUDBase
from assessment_engine.models.skill import DeckSkillMapping, EmployeeSkillScore
from assessment_engine.schemas.skill import EmployeeSkillScore as EmployeeSkillScoreSchema

class CRUDEmployeeSkillScore(CRUDBase[EmployeeSkillScore, EmployeeSkillScoreSchema, EmployeeSkillScoreSchema]):

    def get_domain_ids_for_deck(self, db: Session, *, deck_id: int) -> List[int]:
        rows = (
            db.query(DeckSkillMapping.skill_domain_id)
            .filter(DeckSkillMapping.deck_id == deck_id)
            .order_by(DeckSkillMapping.skill_domain_id)
            .all()
        )
        return [row[0] for row in rows]

    def get_by_domains(
        self, db: Session, *, org_id: int, user_id: int, skill_domain_ids: Sequence[int]
    ) -> Dict[int, EmployeeSkillScore]:
        if not skill_domain_ids:
            return {}
        rows = (
            db.query(EmployeeSkillScore)
            .filter(EmployeeSkillScore.org_id == org_id)
            .filter(EmployeeSkillScore.user_id == user_id)
            .filter(EmployeeSkillScore.skill_domain_id.in_(skill_domain_ids))
            .all()
        )
        return {row.skill_domain_id: row for row in rows}

    def get_for_user(self, db: Session, *, org_id: int, user_id: int) -> List[EmployeeSkillScore]:
        return (
            db.query(EmployeeSkillScore)
            .filter(EmployeeSkillScore.org_id == org_id)
            .filter(EmployeeSkillScore.user_id == user_id)
            .order_by(EmployeeSkillScore.skill_domain_id)
            .all()
        )

employee_skill_score = CRUDEmployeeSkillScore(EmployeeSkillScore)
