"""Judging session: one judge's scoring workflow for a competition."""

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import replace
from enum import Enum
from functools import partial

from judging.classify import classify
from judging.config import Settings, settings as default_settings
from judging.models import (
    Competition,
    CompetitorRole,
    JudgeStatus,
    Score,
    ScoreSheet,
)
from judging.saving import SaveQueue, SaveReport
from judging.stores.base import ScoreRecordStore, StoreError
from judging.ties import TieWarning, significant_ties

logger = logging.getLogger(__name__)


class SheetState(str, Enum):
    LOADING = "loading"
    DRAFT = "draft"
    SUBMITTED = "submitted"
    REOPENED = "reopened"


class UnsavedChanges(str, Enum):
    """What to do with unsaved changes when switching role."""
    SAVE = "save"
    DISCARD = "discard"


class SessionError(Exception):
    """A session operation was called in a state that does not allow it."""
    pass


class SheetLockedError(SessionError):
    """Scores were edited on a submitted sheet without reopening it."""
    pass


class IncompleteScoresError(SessionError):
    """Submit was attempted while some competitor is still unscored."""
    pass


class ConfirmationRequired(SessionError):
    """Reopening a submitted sheet needs explicit confirmation."""
    pass


class UnsavedChangesError(SessionError):
    """Switching role would drop unsaved changes; caller must choose save or discard."""
    pass


class JudgingSession:
    """Stateful scoring workflow for one judge.

    A regular judge works on one role at a time; the chief judge covers every
    role they are assigned. The session moves through::

        LOADING -> DRAFT -> SUBMITTED -> REOPENED -> SUBMITTED

    DRAFT and REOPENED are editable. Every score change marks the sheet for
    re-classification and schedules an auto-save. Re-classification is
    coalesced: it runs at most once per burst of changes, when scores are
    next read or a snapshot is written. Saves go through a SaveQueue, so a
    burst of changes produces one write of the newest snapshot.

    Store failures are never raised from here. They are logged, returned in
    a SaveReport and kept in ``last_save_error``; the unsaved sheet stays
    queued and is retried on the next flush or submit.

    Example:
        >>> session = JudgingSession(store, competition, "J2")
        >>> session.load()
        >>> session.set_score("L1", 85)
        >>> session.flush()
    """

    def __init__(
        self,
        store: ScoreRecordStore,
        competition: Competition,
        judge_id: str,
        save_queue: SaveQueue | None = None,
        clock: Callable[[], float] = time.time,
        settings: Settings = default_settings,
    ):
        self.store = store
        self.competition = competition
        self.judge = competition.get_judge(judge_id)
        if not self.judge.roles:
            raise ValueError(f"Judge {self.judge.name} must have at least one role assigned")

        self.settings = settings
        self.current_role = self.judge.roles[0]
        self.state = SheetState.LOADING
        self.last_save_error: StoreError | None = None

        self._clock = clock
        self._lock = threading.RLock()
        self._sheets: dict[CompetitorRole, ScoreSheet] = {}
        self._ranked: dict[CompetitorRole, list[Score]] = {}
        self._recompute_pending: set[CompetitorRole] = set()
        self._saves = save_queue or SaveQueue(
            store.save_judging_sheet,
            max_attempts=settings.save_max_attempts,
            backoff_seconds=settings.save_backoff_seconds,
        )

    # --- scope ---

    @property
    def roles_in_scope(self) -> list[CompetitorRole]:
        if self.judge.is_chief_judge:
            return list(self.judge.roles)
        return [self.current_role]

    @property
    def is_editable(self) -> bool:
        return self.state in (SheetState.DRAFT, SheetState.REOPENED)

    @property
    def is_dirty(self) -> bool:
        """Whether some in-scope sheet has changes not yet in the store."""
        return any(self._saves.has_pending(sheet.key) for sheet in self._scope_sheets())

    def _scope_sheets(self) -> list[ScoreSheet]:
        return [self._sheets[role] for role in self.roles_in_scope if role in self._sheets]

    # --- loading ---

    def load(self) -> None:
        """Fetch or initialise the sheets in scope and enter DRAFT or SUBMITTED."""
        with self._lock:
            self.state = SheetState.LOADING
            self._sheets = {}
            self._ranked = {}
            self._recompute_pending = set()
            for role in self.roles_in_scope:
                self._sheets[role] = self._load_sheet(role)
                self._recompute_pending.add(role)

            if all(sheet.submitted for sheet in self._sheets.values()):
                self.state = SheetState.SUBMITTED
            else:
                self.state = SheetState.DRAFT
            logger.info(
                "Loaded %s for judge %s (%s)",
                ", ".join(r.value for r in self.roles_in_scope), self.judge.id, self.state.value,
            )

    def _load_sheet(self, role: CompetitorRole) -> ScoreSheet:
        try:
            sheet = self.store.get_judging_sheet(self.competition.id, self.judge.id, role)
        except StoreError as e:
            logger.error("Error loading existing scores for %s: %s", role.value, e)
            sheet = None

        competitors = self.competition.get_competitors(role)
        if sheet is None:
            return ScoreSheet(
                competition_id=self.competition.id,
                judge_id=self.judge.id,
                role=role,
                scores=[Score(competitor_id=c.id) for c in competitors],
                last_updated=self._clock(),
            )

        # Add entries for competitors missing from an older sheet
        known = {s.competitor_id for s in sheet.scores}
        for competitor in competitors:
            if competitor.id not in known:
                sheet.scores.append(Score(competitor_id=competitor.id))
        return sheet

    # --- scoring ---

    def set_score(self, competitor_id: str, raw_score: float | None) -> None:
        """Record a raw score (None clears it) and schedule an auto-save.

        Raises:
            SheetLockedError: If the sheet is submitted and not reopened
            KeyError: If the competitor is not in this session's scope
            ValueError: If raw_score is NaN
        """
        with self._lock:
            self._require_editable()
            if raw_score is not None and math.isnan(raw_score):
                raise ValueError("Raw score must be a number")

            role, index = self._locate(competitor_id)
            sheet = self._sheets[role]
            sheet.scores[index] = replace(sheet.scores[index], raw_score=raw_score)
            sheet.last_updated = self._clock()
            self._recompute_pending.add(role)
            self._saves.schedule(sheet.key, partial(self._snapshot, role))

    def _require_editable(self) -> None:
        if self.state == SheetState.SUBMITTED:
            raise SheetLockedError("Scores are submitted; reopen the sheet to edit them")
        if self.state == SheetState.LOADING:
            raise SessionError("Session is not loaded")

    def _locate(self, competitor_id: str) -> tuple[CompetitorRole, int]:
        for role in self.roles_in_scope:
            for index, score in enumerate(self._sheets[role].scores):
                if score.competitor_id == competitor_id:
                    return role, index
        raise KeyError(f"Competitor {competitor_id} is not being judged in this session")

    def recompute(self) -> None:
        """Run the classifier for every sheet with changes since the last run."""
        with self._lock:
            for role in list(self._recompute_pending):
                self._recompute(role)

    def _recompute(self, role: CompetitorRole) -> None:
        if role not in self._recompute_pending:
            return
        sheet = self._sheets[role]
        ranked = classify(
            sheet.scores,
            self.competition.required_yes_count,
            self.competition.alternate_count,
            self.judge.is_chief_judge,
        )
        by_id = {s.competitor_id: s for s in ranked}
        sheet.scores = [by_id[s.competitor_id] for s in sheet.scores]
        self._ranked[role] = ranked
        self._recompute_pending.discard(role)

    def scores(self, role: CompetitorRole | None = None) -> list[Score]:
        """Classified scores for a role, in bib order."""
        role = role or self.current_role
        with self._lock:
            self._recompute(role)
            bibs = {c.id: c.bib_number for c in self.competition.get_competitors(role)}
            return sorted(self._sheets[role].scores, key=lambda s: bibs.get(s.competitor_id, 0))

    def ranked(self, role: CompetitorRole | None = None) -> list[Score]:
        """Classified scores for a role, best first."""
        role = role or self.current_role
        with self._lock:
            self._recompute(role)
            return list(self._ranked[role])

    def ties(self, role: CompetitorRole | None = None) -> list[TieWarning]:
        """Ties in a role that cross a callback boundary."""
        return significant_ties(
            self.ranked(role),
            self.competition.required_yes_count,
            self.competition.alternate_count,
            self.judge.is_chief_judge,
        )

    def sheet(self, role: CompetitorRole | None = None) -> ScoreSheet:
        """Copy of the current sheet for a role."""
        return self._snapshot(role or self.current_role)

    def _snapshot(self, role: CompetitorRole) -> ScoreSheet:
        with self._lock:
            self._recompute(role)
            return ScoreSheet.from_dict(self._sheets[role].to_dict())

    # --- persistence ---

    def flush(self) -> SaveReport:
        """Write pending changes for the sheets in scope now."""
        report = self._saves.drain([sheet.key for sheet in self._scope_sheets()])
        self._record(report)
        return report

    def _record(self, report: SaveReport) -> None:
        if report.failed:
            self.last_save_error = next(reversed(report.failed.values()))
            logger.warning(
                "Scores not saved for %d sheet(s); they are kept and will be retried",
                len(report.failed),
            )
        elif report.saved:
            self.last_save_error = None

    def start_autosave(self, interval: float | None = None) -> None:
        """Drain pending saves in the background."""
        self._saves.start(interval or self.settings.autosave_interval_seconds)

    def close(self) -> SaveReport:
        """Stop background saving and write anything still pending."""
        report = self._saves.stop()
        self._record(report)
        return report

    # --- submission ---

    def can_submit(self) -> bool:
        """True when every competitor in scope has a raw score."""
        with self._lock:
            if self.state == SheetState.LOADING:
                return False
            return all(sheet.is_complete for sheet in self._scope_sheets())

    def submit(self) -> SaveReport:
        """Freeze the scores and persist them as submitted.

        Submitting again while SUBMITTED retries any save that failed.

        Raises:
            IncompleteScoresError: If can_submit() is False
        """
        with self._lock:
            if self.state != SheetState.SUBMITTED:
                self._require_editable()
                if not self.can_submit():
                    raise IncompleteScoresError("All competitors must be scored before submitting")

                for role in self.roles_in_scope:
                    sheet = self._sheets[role]
                    self._recompute_pending.add(role)
                    self._recompute(role)
                    sheet.submitted = True
                    sheet.last_updated = self._clock()
                    self._saves.schedule(sheet.key, partial(self._snapshot, role))
                self.state = SheetState.SUBMITTED

        report = self.flush()
        if report.ok:
            logger.info("Judge %s submitted %s", self.judge.id,
                        ", ".join(r.value for r in self.roles_in_scope))
            if self._all_roles_submitted():
                self._set_judge_status(JudgeStatus.SUBMITTED)
        return report

    def reopen(self, confirm: bool = False) -> None:
        """Return a submitted sheet to editing; it must be submitted again to count.

        Raises:
            ConfirmationRequired: If confirm is not True
        """
        with self._lock:
            if self.state != SheetState.SUBMITTED:
                raise SessionError("Only submitted scores can be reopened")
            if not confirm:
                raise ConfirmationRequired(
                    "Editing submitted scores will affect the final results; confirm to continue"
                )
            for role in self.roles_in_scope:
                sheet = self._sheets[role]
                sheet.submitted = False
                sheet.last_updated = self._clock()
                self._saves.schedule(sheet.key, partial(self._snapshot, role))
            self.state = SheetState.REOPENED
        self._set_judge_status(JudgeStatus.PENDING)

    def _all_roles_submitted(self) -> bool:
        for role in self.judge.roles:
            sheet = self._sheets.get(role)
            if sheet is None:
                try:
                    sheet = self.store.get_judging_sheet(self.competition.id, self.judge.id, role)
                except StoreError as e:
                    logger.warning("Could not check %s sheet: %s", role.value, e)
                    return False
            if sheet is None or not sheet.submitted:
                return False
        return True

    def _set_judge_status(self, status: JudgeStatus) -> None:
        if self.judge.status == status:
            return
        self.judge.status = status
        try:
            competition = self.store.get_competition(self.competition.id) or self.competition
            competition.get_judge(self.judge.id).status = status
            self.store.save_competition(competition)
        except StoreError as e:
            self.last_save_error = e
            logger.warning("Could not update status of judge %s: %s", self.judge.id, e)

    # --- roles ---

    def switch_role(self, role: CompetitorRole, unsaved: UnsavedChanges | None = None) -> SaveReport:
        """Switch the active role, loading its sheet.

        With unsaved changes the caller must pass UnsavedChanges.SAVE or
        UnsavedChanges.DISCARD. If saving fails the role is not switched;
        check ``report.ok``.

        Raises:
            ValueError: If the judge is not assigned to role
            UnsavedChangesError: If there are unsaved changes and no choice was given
        """
        if role not in self.judge.roles:
            raise ValueError(f"Judge {self.judge.name} does not judge {role.value}s")
        report = SaveReport()
        if role == self.current_role:
            return report

        if self.is_dirty and not self.judge.is_chief_judge:
            if unsaved is None:
                raise UnsavedChangesError(
                    "You have unsaved changes. Save or discard them before switching"
                )
            if unsaved == UnsavedChanges.SAVE:
                report = self.flush()
                if not report.ok:
                    return report
            else:
                for sheet in self._scope_sheets():
                    self._saves.discard(sheet.key)
                logger.info("Discarded unsaved %s scores for judge %s",
                            self.current_role.value, self.judge.id)

        self.current_role = role
        if not self.judge.is_chief_judge:
            self.load()
        return report
