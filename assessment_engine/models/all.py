# Importing every model registers its table on Base.metadata
from assessment_engine.models.organization import Organization
from assessment_engine.models.profile import Profile
from assessment_engine.models.deck import Deck, Card
from assessment_engine.models.assessment import Assessment
from assessment_engine.models.assessment_session import AssessmentSession
from assessment_engine.models.assessment_answer import AssessmentAnswer
from assessment_engine.models.skill import SkillDomain, DeckSkillMapping, EmployeeSkillScore
from assessment_engine.models.certificate import Certificate

__all__ = [
    "Organization",
    "Profile",
    "Deck",
    "Card",
    "Assessment",
    "AssessmentSession",
    "AssessmentAnswer",
    "SkillDomain",
    "DeckSkillMapping",
    "EmployeeSkillScore",
    "Certificate",
]
