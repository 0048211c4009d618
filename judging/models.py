"""Core data models for competitions, judges and score sheets."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self


class CompetitorRole(str, Enum):
    LEADER = "Leader"
    FOLLOWER = "Follower"


class CompetitionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class JudgeStatus(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"


YES = "YES"
NO = "NO"
ALT = "ALT"


def alt_status(number: int) -> str:
    """Status string for the n-th alternate slot (1-indexed)."""
    return f"{ALT}{number}"


def display_status(status: str | None) -> str | None:
    """Collapse ALT1..ALTn into a single ALT bucket for display."""
    if status is not None and status.startswith(ALT):
        return ALT
    return status


@dataclass
class Competitor:
    """A single dancer in a prelim round.

    Attributes:
        id: Unique identifier within the competition
        name: Display name
        role: Leader or Follower
        bib_number: Bib worn on the floor; used for display ordering
    """
    id: str
    name: str
    role: CompetitorRole
    bib_number: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "bib_number": self.bib_number,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            name=data["name"],
            role=CompetitorRole(data["role"]),
            bib_number=int(data["bib_number"]),
        )


@dataclass
class Judge:
    """A judge on the panel.

    The chief judge scores to produce a pure rank ordering; regular judges
    score to produce YES / ALTn / NO callbacks.
    """
    id: str
    name: str
    roles: list[CompetitorRole]
    is_chief_judge: bool = False
    status: JudgeStatus = JudgeStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "roles": [r.value for r in self.roles],
            "is_chief_judge": self.is_chief_judge,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            name=data["name"],
            roles=[CompetitorRole(r) for r in data.get("roles", [])],
            is_chief_judge=bool(data.get("is_chief_judge", False)),
            status=JudgeStatus(data.get("status", JudgeStatus.PENDING.value)),
        )


@dataclass
class Competition:
    """A prelim round with its panel, competitors and callback configuration.

    Attributes:
        id: Competition identifier
        name: Name of the competition/event
        judges: Panel of judges (exactly one chief judge once validated)
        competitors: Dict mapping role -> competitors dancing that role
        required_yes_count: Number of YES callbacks each judge gives
        alternate_count: Number of alternate slots after the YES block
        advancing_count: Number of competitors per role moving on
        status: pending -> active -> completed
        date: Free-form event date
        type: Round type; only "Prelim" rounds are judged here
    """
    id: str
    name: str
    judges: list[Judge]
    competitors: dict[CompetitorRole, list[Competitor]]
    required_yes_count: int
    alternate_count: int
    advancing_count: int
    status: CompetitionStatus = CompetitionStatus.PENDING
    date: str = ""
    type: str = "Prelim"

    @property
    def chief_judge(self) -> Judge | None:
        for judge in self.judges:
            if judge.is_chief_judge:
                return judge
        return None

    @property
    def regular_judges(self) -> list[Judge]:
        return [j for j in self.judges if not j.is_chief_judge]

    def get_judge(self, judge_id: str) -> Judge:
        for judge in self.judges:
            if judge.id == judge_id:
                return judge
        raise KeyError(f"Unknown judge: {judge_id}")

    def get_competitors(self, role: CompetitorRole) -> list[Competitor]:
        return self.competitors.get(role, [])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "type": self.type,
            "status": self.status.value,
            "judges": [j.to_dict() for j in self.judges],
            "competitors": {
                role.value: [c.to_dict() for c in competitors]
                for role, competitors in self.competitors.items()
            },
            "required_yes_count": self.required_yes_count,
            "alternate_count": self.alternate_count,
            "advancing_count": self.advancing_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            name=data["name"],
            date=data.get("date", ""),
            type=data.get("type", "Prelim"),
            status=CompetitionStatus(data.get("status", CompetitionStatus.PENDING.value)),
            judges=[Judge.from_dict(j) for j in data.get("judges", [])],
            competitors={
                CompetitorRole(role): [Competitor.from_dict(c) for c in competitors]
                for role, competitors in data.get("competitors", {}).items()
            },
            required_yes_count=int(data.get("required_yes_count", 0)),
            alternate_count=int(data.get("alternate_count", 0)),
            advancing_count=int(data.get("advancing_count", 0)),
        )


@dataclass
class Score:
    """One judge's score for one competitor, plus the computed placement.

    Raw scores are plain numbers on whatever scale the entry surface uses
    (0-10 rank entry, 0-100 slider). Only their relative order matters.

    Attributes:
        competitor_id: Competitor being scored
        raw_score: Judge's number, or None while unscored
        rank: Competition rank among scored entries (1 = best)
        has_tie: Whether another entry shares this raw score
        tied_with: Ids of the other competitors sharing this raw score
        status: YES, ALTn or NO; None while unscored
    """
    competitor_id: str
    raw_score: float | None = None
    rank: int | None = None
    has_tie: bool = False
    tied_with: list[str] = field(default_factory=list)
    status: str | None = None

    @property
    def is_scored(self) -> bool:
        return self.raw_score is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "competitor_id": self.competitor_id,
            "raw_score": self.raw_score,
            "rank": self.rank,
            "has_tie": self.has_tie,
            "tied_with": list(self.tied_with),
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            competitor_id=data["competitor_id"],
            raw_score=data.get("raw_score"),
            rank=data.get("rank"),
            has_tie=bool(data.get("has_tie", False)),
            tied_with=list(data.get("tied_with") or []),
            status=data.get("status"),
        )


@dataclass
class ScoreSheet:
    """A judge's sheet for one role in one competition.

    Example:
        >>> sheet = ScoreSheet(
        ...     competition_id="c1",
        ...     judge_id="J2",
        ...     role=CompetitorRole.LEADER,
        ...     scores=[Score("L1", 80), Score("L2", None)],
        ... )
    """
    competition_id: str
    judge_id: str
    role: CompetitorRole
    scores: list[Score] = field(default_factory=list)
    submitted: bool = False
    last_updated: float = field(default_factory=time.time)

    @property
    def key(self) -> tuple[str, str, CompetitorRole]:
        return (self.competition_id, self.judge_id, self.role)

    @property
    def is_complete(self) -> bool:
        return all(s.is_scored for s in self.scores)

    def get_score(self, competitor_id: str) -> Score | None:
        for score in self.scores:
            if score.competitor_id == competitor_id:
                return score
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "competition_id": self.competition_id,
            "judge_id": self.judge_id,
            "role": self.role.value,
            "scores": [s.to_dict() for s in self.scores],
            "submitted": self.submitted,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            competition_id=data["competition_id"],
            judge_id=data["judge_id"],
            role=CompetitorRole(data["role"]),
            scores=[Score.from_dict(s) for s in data.get("scores", [])],
            submitted=bool(data.get("submitted", False)),
            last_updated=float(data.get("last_updated", 0.0)),
        )
