import logging
import secrets
from typing import Callable, List, MutableSequence, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def shuffle_in_place(items: MutableSequence[T], randbelow: Callable[[int], int] = secrets.randbelow) -> None:
    """Unbiased Fisher-Yates shuffle driven by a CSPRNG."""
    for i in range(len(items) - 1, 0, -1):
        j = randbelow(i + 1)
        items[i], items[j] = items[j], items[i]


def select_questions(
    question_ids: Sequence[int],
    question_count: int,
    shuffle: bool,
    randbelow: Callable[[int], int] = secrets.randbelow,
) -> List[int]:
    """
    Draw the frozen question order for a new session.

    Shuffles first (when asked) and then truncates, so every question in the
    deck has the same chance of being drawn. A deck holding fewer questions
    than requested yields all of them.
    """
    pool = list(question_ids)
    if shuffle:
        shuffle_in_place(pool, randbelow)
    if len(pool) < question_count:
        logger.warning(
            f"Deck holds {len(pool)} questions but {question_count} were requested, using all of them"
        )
    return pool[:question_count]
