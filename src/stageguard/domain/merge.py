"""
Merge policy for dual-candidate stages.

Chooses the winning candidate between two engine outputs. An absent side
counts as score 0 with an empty result, so single-engine stages go through
the same table.
"""

from dataclasses import dataclass

from stageguard.domain.scoring import PASS_THRESHOLD


@dataclass(frozen=True)
class Candidate:
    """One engine's scored output for a gated stage."""

    engine: str
    score: int
    result: str


@dataclass(frozen=True)
class MergeDecision:
    """Outcome of the merge policy."""

    winner: Candidate
    final_score: int
    threshold: int = PASS_THRESHOLD  # Gate the decision was made against

    @property
    def passed(self) -> bool:
        return self.final_score >= self.threshold


def merge_candidates(
    candidate_a: Candidate | None,
    candidate_b: Candidate | None,
    threshold: int = PASS_THRESHOLD,
) -> MergeDecision:
    """
    Decide the winner.

    | A passes | B passes | winner                                |
    |----------|----------|---------------------------------------|
    | yes      | yes      | higher score (ties: A)                |
    | yes      | no       | A                                     |
    | no       | yes      | B                                     |
    | no       | no       | higher score (ties: A), still failing |

    Args:
        candidate_a: First engine's output (None if absent)
        candidate_b: Second engine's output (None if absent)
        threshold: Passing score

    An absent side scores 0 with an empty result; it never wins against a
    present candidate, even a present candidate that also scored 0.

    Returns:
        MergeDecision with the winner and its score

    Raises:
        ValueError: If both candidates are absent
    """
    if candidate_a is None and candidate_b is None:
        raise ValueError("At least one candidate is required")
    if candidate_b is None:
        return MergeDecision(candidate_a, candidate_a.score, threshold=threshold)
    if candidate_a is None:
        return MergeDecision(candidate_b, candidate_b.score, threshold=threshold)

    a, b = candidate_a, candidate_b
    a_passes = a.score >= threshold
    b_passes = b.score >= threshold

    if a_passes and not b_passes:
        winner = a
    elif b_passes and not a_passes:
        winner = b
    else:
        winner = a if a.score >= b.score else b

    return MergeDecision(winner=winner, final_score=winner.score, threshold=threshold)
