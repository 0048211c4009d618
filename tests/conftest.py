"""Shared test helpers."""

import pytest

from judging.models import (
    Competition,
    Competitor,
    CompetitorRole,
    Judge,
    Score,
    ScoreSheet,
)
from judging.stores.memory import InMemoryStore

LEADER = CompetitorRole.LEADER
FOLLOWER = CompetitorRole.FOLLOWER


def make_scores(table: dict[str, float | None]) -> list[Score]:
    """Build unclassified Scores from a compact {competitor_id: raw_score} table."""
    return [Score(competitor_id=cid, raw_score=raw) for cid, raw in table.items()]


def by_id(scores: list[Score]) -> dict[str, Score]:
    return {s.competitor_id: s for s in scores}


def make_competition(
    leaders: list[str] = ("L1", "L2", "L3", "L4", "L5", "L6"),
    followers: list[str] = ("F1", "F2", "F3", "F4", "F5"),
    required_yes_count: int = 3,
    alternate_count: int = 2,
    advancing_count: int = 5,
) -> Competition:
    """Build a competition with a chief judge (J1) and three regular judges.

    J2 and J3 judge both roles, J4 judges leaders only and J5 followers
    only, so each role has an odd number (3) of scoring judges. Bibs are
    101.. for leaders and 201.. for followers, in list order.
    """
    both = [LEADER, FOLLOWER]
    return Competition(
        id="comp-1",
        name="Novice Prelims",
        judges=[
            Judge(id="J1", name="Chief", roles=list(both), is_chief_judge=True),
            Judge(id="J2", name="Judge Two", roles=list(both)),
            Judge(id="J3", name="Judge Three", roles=list(both)),
            Judge(id="J4", name="Judge Four", roles=[LEADER]),
            Judge(id="J5", name="Judge Five", roles=[FOLLOWER]),
        ],
        competitors={
            LEADER: [
                Competitor(id=cid, name=f"Leader {cid}", role=LEADER, bib_number=101 + i)
                for i, cid in enumerate(leaders)
            ],
            FOLLOWER: [
                Competitor(id=cid, name=f"Follower {cid}", role=FOLLOWER, bib_number=201 + i)
                for i, cid in enumerate(followers)
            ],
        },
        required_yes_count=required_yes_count,
        alternate_count=alternate_count,
        advancing_count=advancing_count,
    )


def make_sheet(
    judge_id: str,
    role: CompetitorRole,
    ranks: dict[str, int | None],
    submitted: bool = True,
    competition_id: str = "comp-1",
) -> ScoreSheet:
    """Build a sheet from {competitor_id: rank}; raw scores mirror the ranks."""
    return ScoreSheet(
        competition_id=competition_id,
        judge_id=judge_id,
        role=role,
        scores=[
            Score(
                competitor_id=cid,
                raw_score=None if rank is None else float(100 - rank),
                rank=rank,
            )
            for cid, rank in ranks.items()
        ],
        submitted=submitted,
        last_updated=1000.0,
    )


@pytest.fixture
def competition():
    return make_competition()


@pytest.fixture
def store(competition):
    store = InMemoryStore()
    store.save_competition(competition)
    return store
