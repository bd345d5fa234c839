from typing import List, Sequence
from sqlalchemy.orm import Session

from assessment_engine.crud.base import CRUDBase
from assessment_engine.models.deck import Card
from assessment_engine.schemas.deck import CardCreate

class CRUDCard(CRUDBase[Card, CardCreate, CardCreate]):
    def get_ids_by_deck(self, db: Session, *, deck_id: int) -> List[int]:
        result = db.query(Card.id).filter(Card.deck_id == deck_id).order_by(Card.id).all()
        return [row[0] for row in result]

    def count_by_deck(self, db: Session, *, deck_id: int) -> int:
        return db.query(Card).filter(Card.deck_id == deck_id).count()

    def get_many(self, db: Session, *, ids: Sequence[int]) -> List[Card]:
        if not ids:
            return []
        return db.query(Card).filter(Card.id.in_(ids)).all()

card = CRUDCard(Card)
