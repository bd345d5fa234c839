from typing import Optional
from sqlalchemy.orm import Session

from assessment_engine.crud.base import CRUDBase
from assessment_engine.models.deck import Deck
from assessment_engine.schemas.deck import DeckCreate

class CRUDDeck(CRUDBase[Deck, DeckCreate, DeckCreate]):
    def get_for_org(self, db: Session, *, id: int, org_id: int) -> Optional[Deck]:
        return db.query(Deck).filter(Deck.id == id, Deck.org_id == org_id).first()

deck = CRUDDeck(Deck)
