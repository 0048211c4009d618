"""Results aggregation across judges: results table and advancing list."""

import logging
from dataclasses import dataclass, field
from typing import Any

from judging.classify import points_for_status, status_for_rank
from judging.models import Competition, Competitor, CompetitorRole, Judge, ScoreSheet
from judging.stores.base import ScoreRecordStore

logger = logging.getLogger(__name__)


@dataclass
class JudgeCell:
    """One regular judge's verdict on one competitor."""
    raw_score: float | None
    status: str | None
    derived_points: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw_score": self.raw_score,
            "status": self.status,
            "derived_points": self.derived_points,
        }


@dataclass
class CompetitorResultRow:
    """A competitor's line in the results table.

    Attributes:
        competitor: The competitor
        chief_judge_rank: Rank from the chief judge's submitted sheet, if any
        judge_cells: Dict mapping regular judge id -> JudgeCell, for judges
            who submitted a sheet for this role
    """
    competitor: Competitor
    chief_judge_rank: int | None = None
    judge_cells: dict[str, JudgeCell] = field(default_factory=dict)

    @property
    def total_points(self) -> float:
        return sum(cell.derived_points for cell in self.judge_cells.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "competitor_id": self.competitor.id,
            "bib_number": self.competitor.bib_number,
            "name": self.competitor.name,
            "chief_judge_rank": self.chief_judge_rank,
            "judge_cells": {j: cell.to_dict() for j, cell in self.judge_cells.items()},
            "total_points": round(self.total_points, 2),
        }


@dataclass
class JudgeScore:
    """A single (judge, competitor) score, flattened out of a sheet."""
    judge_id: str
    competitor_id: str
    raw_score: float | None
    status: str | None = None

    @property
    def points(self) -> float:
        return points_for_status(self.status)


def _submitted_sheet(
    sheets: list[ScoreSheet], judge_id: str, role: CompetitorRole
) -> ScoreSheet | None:
    for sheet in sheets:
        if sheet.judge_id == judge_id and sheet.role == role and sheet.submitted:
            return sheet
    return None


def build_results_table(
    competition: Competition,
    submitted_sheets: list[ScoreSheet],
    role: CompetitorRole,
) -> list[CompetitorResultRow]:
    """Combine submitted sheets into one row per competitor in role.

    Each regular judge's status is re-derived from the rank on their sheet
    using the competition's cutoff, then mapped to points (YES=10,
    ALT1=4.5, ALT2=4.3, ALT3=4.2, NO=0). Sheets that are not submitted are
    ignored. Rows are in bib order.
    """
    rows = {
        c.id: CompetitorResultRow(competitor=c)
        for c in competition.get_competitors(role)
    }

    chief = competition.chief_judge
    if chief is not None:
        sheet = _submitted_sheet(submitted_sheets, chief.id, role)
        if sheet is not None:
            for score in sheet.scores:
                if score.competitor_id in rows:
                    rows[score.competitor_id].chief_judge_rank = score.rank

    for judge in competition.regular_judges:
        sheet = _submitted_sheet(submitted_sheets, judge.id, role)
        if sheet is None:
            continue
        for score in sheet.scores:
            row = rows.get(score.competitor_id)
            if row is None:
                logger.warning(
                    "Sheet of judge %s scores unknown competitor %s", judge.id, score.competitor_id
                )
                continue
            status = status_for_rank(
                score.rank, competition.required_yes_count, competition.alternate_count
            )
            row.judge_cells[judge.id] = JudgeCell(
                raw_score=score.raw_score,
                status=status,
                derived_points=points_for_status(status),
            )

    return sorted(rows.values(), key=lambda r: r.competitor.bib_number)


def judge_scores_from_sheets(
    competition: Competition, sheets: list[ScoreSheet]
) -> list[JudgeScore]:
    """Flatten submitted sheets into JudgeScore records with derived statuses."""
    chief = competition.chief_judge
    scores = []
    for sheet in sheets:
        if not sheet.submitted:
            continue
        is_chief = chief is not None and sheet.judge_id == chief.id
        for score in sheet.scores:
            status = None if is_chief else status_for_rank(
                score.rank, competition.required_yes_count, competition.alternate_count
            )
            scores.append(JudgeScore(
                judge_id=sheet.judge_id,
                competitor_id=score.competitor_id,
                raw_score=score.raw_score,
                status=status,
            ))
    return scores


def determine_advancing(
    all_judges_scores: list[JudgeScore],
    competitors: list[Competitor],
    advancing_count: int,
    chief_judge: Judge | None,
) -> list[Competitor]:
    """Pick the competitors who advance on total points.

    Points from every regular judge are summed per competitor. Ties on total
    points are broken by the chief judge's raw score (higher first; a missing
    chief score sorts last). Remaining ties keep bib order.
    """
    chief_id = chief_judge.id if chief_judge is not None else None
    totals = {c.id: 0.0 for c in competitors}
    chief_scores: dict[str, float] = {}

    for score in all_judges_scores:
        if score.competitor_id not in totals:
            continue
        if score.judge_id == chief_id:
            if score.raw_score is not None:
                chief_scores[score.competitor_id] = score.raw_score
            continue
        totals[score.competitor_id] += score.points

    def sort_key(competitor: Competitor) -> tuple:
        chief_score = chief_scores.get(competitor.id)
        return (
            -totals[competitor.id],
            chief_score is None,
            -(chief_score or 0.0),
            competitor.bib_number,
        )

    ranked = sorted(competitors, key=sort_key)
    return ranked[:max(advancing_count, 0)]


@dataclass
class RoundResults:
    """Results of one role in a prelim round."""
    competition: Competition
    role: CompetitorRole
    rows: list[CompetitorResultRow]
    advancing: list[Competitor]
    submitted_judges: list[str]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        advancing_ids = {c.id for c in self.advancing}
        return {
            "competition_id": self.competition.id,
            "competition_name": self.competition.name,
            "role": self.role.value,
            "required_yes_count": self.competition.required_yes_count,
            "alternate_count": self.competition.alternate_count,
            "advancing_count": self.competition.advancing_count,
            "submitted_judges": self.submitted_judges,
            "rows": [
                {**row.to_dict(), "advancing": row.competitor.id in advancing_ids}
                for row in self.rows
            ],
            "advancing": [c.id for c in self.advancing],
        }


class ResultsError(Exception):
    """Error while compiling round results."""
    pass


def compile_round_results(
    store: ScoreRecordStore, competition_id: str, role: CompetitorRole
) -> RoundResults:
    """Load a competition's submitted sheets and build its results for one role.

    Raises:
        ResultsError: If the competition does not exist
        StoreError: If the store cannot be read
    """
    competition = store.get_competition(competition_id)
    if competition is None:
        raise ResultsError(f"Competition {competition_id} not found")

    sheets = [s for s in store.get_judging_sheets(competition_id, role) if s.submitted]
    rows = build_results_table(competition, sheets, role)
    advancing = determine_advancing(
        judge_scores_from_sheets(competition, sheets),
        competition.get_competitors(role),
        competition.advancing_count,
        competition.chief_judge,
    )
    logger.info(
        "Compiled %s results for %s from %d submitted sheets",
        role.value, competition_id, len(sheets),
    )
    return RoundResults(
        competition=competition,
        role=role,
        rows=rows,
        advancing=advancing,
        submitted_judges=sorted(s.judge_id for s in sheets),
    )
