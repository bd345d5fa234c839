from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional

class DeckCreate(BaseModel):
    org_id: int
    title: str

class Deck(DeckCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)

class CardCreate(BaseModel):
    deck_id: int
    stem: str
    options: List[str] = Field(..., min_length=2)
    correct_index: int = Field(..., ge=0)
    explanation: Optional[str] = None

    @model_validator(mode="after")
    def validate_correct_index(self):
        if self.correct_index >= len(self.options):
            raise ValueError("correct_index must point at one of the options")
        return self
