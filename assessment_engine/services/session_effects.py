"""
Best-effort work triggered by a completed session.

Runs on the event bus after the terminal write has committed. Each effect
opens its own unit of work and failures are logged, never re-raised, so a
broken mail server or a missing skill mapping cannot undo a completion.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from assessment_engine.core.config import settings
from assessment_engine.core.constants import ASSESSMENT_SESSION_COMPLETED
from assessment_engine.core.database import SessionLocal
from assessment_engine.crud.assessment_session import assessment_session as crud_assessment_session
from assessment_engine.crud.certificate import certificate as crud_certificate
from assessment_engine.crud.profile import profile as crud_profile
from assessment_engine.crud.skill import employee_skill_score as crud_skill_score
from assessment_engine.domain.scoring import update_running_average
from assessment_engine.models.certificate import Certificate
from assessment_engine.models.skill import EmployeeSkillScore
from assessment_engine.services.email import EmailService
from assessment_engine.utils.clock import as_naive_utc, utcnow
from assessment_engine.utils.events import event_bus

logger = logging.getLogger(__name__)


def issue_certificate(db: Session, *, session_id: int) -> Optional[Certificate]:
    session = crud_assessment_session.get(db, id=session_id)
    if not session or not session.passed:
        return None

    existing = crud_certificate.get_by_session(db, session_id=session_id)
    if existing:
        return existing

    new_certificate = crud_certificate.create(db, obj_in={"session_id": session_id}, commit=False)
    session.certificate_url = new_certificate.verification_url
    db.commit()
    db.refresh(new_certificate)
    logger.info(f"Certificate {new_certificate.serial} issued for session {session_id}")
    return new_certificate


def update_skill_scores(
    db: Session,
    *,
    org_id: int,
    user_id: int,
    deck_id: int,
    score: int,
    assessed_at: Optional[datetime] = None,
) -> List[EmployeeSkillScore]:
    """Fold the score into the running average of every skill domain the deck maps to."""
    domain_ids = crud_skill_score.get_domain_ids_for_deck(db, deck_id=deck_id)
    if not domain_ids:
        return []

    assessed_at = as_naive_utc(assessed_at) if assessed_at else utcnow()
    existing = crud_skill_score.get_by_domains(db, org_id=org_id, user_id=user_id, skill_domain_ids=domain_ids)

    updated = []
    for domain_id in domain_ids:
        row = existing.get(domain_id)
        if row is None:
            row = EmployeeSkillScore(
                org_id=org_id,
                user_id=user_id,
                skill_domain_id=domain_id,
                score=0.0,
                assessments_taken=0,
            )
            db.add(row)
        row.score = update_running_average(row.score or 0.0, row.assessments_taken or 0, score)
        row.assessments_taken = (row.assessments_taken or 0) + 1
        row.last_assessed_at = assessed_at
        updated.append(row)

    db.commit()
    logger.info(f"Skill scores updated for user {user_id} across {len(updated)} domain(s)")
    return updated


def send_result_email(db: Session, *, session_id: int) -> bool:
    session = crud_assessment_session.get(db, id=session_id)
    if not session:
        return False

    candidate = crud_profile.get(db, id=session.user_id)
    if not candidate or not candidate.email_notifications:
        return False

    assessment = session.assessment
    return EmailService.send_email(
        to_email=candidate.email,
        subject=f"Your results for {assessment.title}",
        template_name="assessment_result.html",
        template_context={
            "candidate_name": candidate.full_name or candidate.email,
            "assessment_title": assessment.title,
            "score": session.score,
            "passed": session.passed,
            "pass_score": assessment.pass_score,
            "certificate_url": session.certificate_url,
            "results_url": f"{settings.FRONTEND_BASE_URL}/assessments/sessions/{session_id}/results",
        },
    )


def _run_effect(db: Session, name: str, session_id: int, effect, /, **kwargs) -> None:
    try:
        effect(db, **kwargs)
    except Exception as e:
        db.rollback()
        logger.warning(f"{name} failed for session {session_id}: {e}", exc_info=True)


def handle_assessment_session_completed(data: Dict[str, Any]) -> None:
    session_id = data["session_id"]
    db = SessionLocal()
    try:
        if data.get("passed"):
            _run_effect(db, "Certificate generation", session_id, issue_certificate, session_id=session_id)
        _run_effect(
            db,
            "Skill score update",
            session_id,
            update_skill_scores,
            org_id=data["org_id"],
            user_id=data["user_id"],
            deck_id=data["deck_id"],
            score=data["score"],
            assessed_at=datetime.fromisoformat(data["completed_at"]) if data.get("completed_at") else None,
        )
        # last, so the email can link the certificate
        _run_effect(db, "Result email", session_id, send_result_email, session_id=session_id)
    finally:
        db.close()


event_bus.subscribe(ASSESSMENT_SESSION_COMPLETED, handle_assessment_session_completed)
