from typing import Optional
from sqlalchemy.orm import Session

from assessment_engine.crud.base import CRUDBase
from assessment_engine.models.profile import Profile
from assessment_engine.schemas.profile import ProfileCreate

class CRUDProfile(CRUDBase[Profile, ProfileCreate, ProfileCreate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.email == email).first()

profile = CRUDProfile(Profile)
