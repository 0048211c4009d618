"""Tie groups and the boundary-significance filter for tie warnings.

Not every tie matters. Two competitors tied deep in the NO block get the
same callback either way, so a judge need not be warned. A tie that spans
two different slots (YES/ALT1, ALT1/ALT2, last ALT/NO) decides who gets
which callback and must be surfaced. For the chief judge every tie matters,
because the chief judge's order is the authoritative ranking.
"""

from dataclasses import dataclass, field
from typing import Any

from judging.classify import status_for_rank
from judging.models import Score


@dataclass
class TieGroup:
    """Competitors sharing one raw score and therefore one rank.

    Attributes:
        competitor_ids: Members of the tie, in classifier output order
        raw_score: The shared raw score
        rank_range: (first, last) positions the group occupies, inclusive
    """
    competitor_ids: list[str]
    raw_score: float
    rank_range: tuple[int, int]


@dataclass
class TieWarning:
    """A tie worth showing to the judge.

    Attributes:
        competitor_ids: Members of the tie
        type: yes_alt, yes_no, between_alts, alt_no or chief_judge
        affected_positions: Slots the tie spans, e.g. ["YES", "ALT1"]
    """
    competitor_ids: list[str]
    type: str
    affected_positions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "competitor_ids": list(self.competitor_ids),
            "type": self.type,
            "affected_positions": list(self.affected_positions),
        }


def find_ties(scores: list[Score]) -> list[TieGroup]:
    """Collect tie groups from classified scores.

    Expects the output of classify(); entries without a rank are ignored.
    """
    by_rank: dict[int, list[Score]] = {}
    for score in scores:
        if score.rank is None or not score.has_tie:
            continue
        by_rank.setdefault(score.rank, []).append(score)

    groups = []
    for rank in sorted(by_rank):
        members = by_rank[rank]
        groups.append(TieGroup(
            competitor_ids=[s.competitor_id for s in members],
            raw_score=members[0].raw_score,
            rank_range=(rank, rank + len(members) - 1),
        ))
    return groups


def is_meaningful_tie(
    tie_rank_range: tuple[int, int],
    required_yes_count: int,
    alternate_count: int,
    is_chief_judge: bool = False,
) -> bool:
    """Whether a tie spanning the given positions changes anyone's outcome."""
    if is_chief_judge:
        return True
    first, last = tie_rank_range
    return (
        status_for_rank(first, required_yes_count, alternate_count)
        != status_for_rank(last, required_yes_count, alternate_count)
    )


def _tie_type(first_status: str, last_status: str) -> str:
    if first_status == "YES":
        return "yes_alt" if last_status.startswith("ALT") else "yes_no"
    if last_status == "NO":
        return "alt_no"
    return "between_alts"


def significant_ties(
    scores: list[Score],
    required_yes_count: int,
    alternate_count: int,
    is_chief_judge: bool = False,
) -> list[TieWarning]:
    """Tie warnings for the ties that cross a callback boundary."""
    warnings = []
    for group in find_ties(scores):
        if not is_meaningful_tie(
            group.rank_range, required_yes_count, alternate_count, is_chief_judge
        ):
            continue

        first, last = group.rank_range
        if is_chief_judge:
            warnings.append(TieWarning(
                competitor_ids=group.competitor_ids,
                type="chief_judge",
                affected_positions=[f"Rank {first}"],
            ))
            continue

        positions = []
        for position in range(first, last + 1):
            status = status_for_rank(position, required_yes_count, alternate_count)
            if status not in positions:
                positions.append(status)
        warnings.append(TieWarning(
            competitor_ids=group.competitor_ids,
            type=_tie_type(positions[0], positions[-1]),
            affected_positions=positions,
        ))
    return warnings
