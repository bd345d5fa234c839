from typing import Iterable, Optional

from pydantic import BaseModel


class ScoreSummary(BaseModel):
    total: int
    correct: int
    score: int
    passed: bool


def calculate_score(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded half away from zero. Zero when there are no answers."""
    if total <= 0:
        return 0
    # integer arithmetic keeps .5 boundaries exact
    return (200 * correct + total) // (2 * total)


def score_answers(correctness: Iterable[Optional[bool]], pass_score: int) -> ScoreSummary:
    """
    Score a session from its answer rows.

    Every row counts towards the total, unanswered placeholders included, so
    skipping a question costs the same as getting it wrong.
    """
    flags = list(correctness)
    total = len(flags)
    correct = sum(1 for flag in flags if flag is True)
    score = calculate_score(correct, total)
    return ScoreSummary(total=total, correct=correct, score=score, passed=score >= pass_score)


def update_running_average(old_score: float, assessments_taken: int, new_score: float) -> float:
    """Fold one more result into a running average, rounded half-up to one decimal."""
    average = (old_score * assessments_taken + new_score) / (assessments_taken + 1)
    return int(average * 10 + 0.5) / 10
