"""Rank/tie classifier for a single judge's scores in one role."""

import logging
import math
from dataclasses import replace

from judging.models import NO, YES, Score, alt_status

logger = logging.getLogger(__name__)

# Points awarded per callback status when totalling across judges
POINTS = {
    YES: 10.0,
    alt_status(1): 4.5,
    alt_status(2): 4.3,
    alt_status(3): 4.2,
    NO: 0.0,
}


def points_for_status(status: str | None) -> float:
    """Derived points for a status; alternates past the third earn ALT3 points."""
    if status is None:
        return 0.0
    if status in POINTS:
        return POINTS[status]
    if status.startswith("ALT"):
        return POINTS[alt_status(3)]
    return 0.0


def status_for_rank(rank: int | None, required_yes_count: int, alternate_count: int) -> str | None:
    """Classify a competition rank against the YES + alternate cutoff.

    Ranks up to required_yes_count are YES, the next alternate_count ranks
    are ALT1..ALTn, everything after is NO.
    """
    if rank is None:
        return None
    required_yes_count = max(required_yes_count, 0)
    alternate_count = max(alternate_count, 0)
    if rank <= required_yes_count:
        return YES
    if rank <= required_yes_count + alternate_count:
        return alt_status(rank - required_yes_count)
    return NO


def classify(
    scores: list[Score],
    required_yes_count: int,
    alternate_count: int,
    is_chief_judge: bool = False,
) -> list[Score]:
    """Rank, tie-detect and classify one judge's scores.

    Scored entries are sorted by raw score (highest first) and given standard
    competition ranks: equal scores share a rank and the next distinct score
    jumps by the size of the tie (1, 1, 3, ...). Every maximal run of equal
    scores is a tie; each member lists the other members in ``tied_with``.
    Status is then derived from the rank with status_for_rank().

    The chief judge's scores are ranked identically. Consumers read ``rank``
    rather than ``status`` for the chief judge.

    Args:
        scores: One entry per competitor; raw_score None means unscored
        required_yes_count: Size of the YES block
        alternate_count: Number of alternate slots after the YES block
        is_chief_judge: Whether these scores come from the chief judge

    Returns:
        New Score objects: scored entries in rank order (input order among
        equal scores, which callers must not depend on), then unscored entries
        in input order. The input list and its Scores are not modified.

    Raises:
        ValueError: If a competitor appears twice or a raw score is NaN
    """
    seen: set[str] = set()
    for score in scores:
        if score.competitor_id in seen:
            raise ValueError(f"Duplicate competitor in scores: {score.competitor_id}")
        seen.add(score.competitor_id)
        if score.raw_score is not None and math.isnan(score.raw_score):
            raise ValueError(f"Raw score for {score.competitor_id} is not a number")

    if required_yes_count < 0 or alternate_count < 0:
        logger.warning(
            "Negative cutoff configuration (yes=%d, alternates=%d); treating as 0",
            required_yes_count, alternate_count,
        )

    scored = [s for s in scores if s.is_scored]
    unscored = [s for s in scores if not s.is_scored]

    # sorted() is stable, so equal scores keep their input order
    ordered = sorted(scored, key=lambda s: s.raw_score, reverse=True)

    # Group maximal runs of equal raw scores
    runs: list[list[Score]] = []
    for score in ordered:
        if runs and runs[-1][0].raw_score == score.raw_score:
            runs[-1].append(score)
        else:
            runs.append([score])

    result: list[Score] = []
    position = 1
    for run in runs:
        rank = position
        run_ids = [s.competitor_id for s in run]
        tied = len(run) > 1
        for score in run:
            result.append(replace(
                score,
                rank=rank,
                has_tie=tied,
                tied_with=[c for c in run_ids if c != score.competitor_id] if tied else [],
                status=status_for_rank(rank, required_yes_count, alternate_count),
            ))
        position += len(run)

    for score in unscored:
        result.append(replace(score, rank=None, has_tie=False, tied_with=[], status=None))

    if is_chief_judge:
        logger.debug("Ranked %d chief judge scores", len(scored))

    return result
