from typing import Optional
from sqlalchemy.orm import Session

from assessment_engine.crud.base import CRUDBase
from assessment_engine.models.certificate import Certificate
from assessment_engine.schemas.certificate import CertificateCreate

class CRUDCertificate(CRUDBase[Certificate, CertificateCreate, CertificateCreate]):
    def get_by_session(self, db: Session, *, session_id: int) -> Optional[Certificate]:
        return db.query(Certificate).filter(Certificate.session_id == session_id).first()

certificate = CRUDCertificate(Certificate)
