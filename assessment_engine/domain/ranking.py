from typing import Sequence

from pydantic import BaseModel


class Ranking(BaseModel):
    percentile: int
    rank: int
    total_sessions: int


def rank_score(score: int, scores: Sequence[int]) -> Ranking:
    """
    Place ``score`` among the finished scores of the same assessment.

    ``scores`` is expected to include the ranked session's own score. The
    percentile is the share of sessions that scored strictly lower.
    """
    total = len(scores)
    if total <= 1:
        return Ranking(percentile=100, rank=1, total_sessions=1)

    ordered = sorted(scores, reverse=True)
    rank = next((index + 1 for index, value in enumerate(ordered) if value <= score), total + 1)
    below = sum(1 for value in ordered if value < score)
    percentile = int(below * 100 / total + 0.5)
    return Ranking(percentile=percentile, rank=rank, total_sessions=total)
