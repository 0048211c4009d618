"""Single-file JSON store."""

import json
import logging
import os
import tempfile
from pathlib import Path

from judging.config import Settings
from judging.models import Competition, CompetitorRole, ScoreSheet
from judging.stores import register_store
from judging.stores.base import ScoreRecordStore, StoreError

logger = logging.getLogger(__name__)

COMPETITIONS_KEY = "competitions"
JUDGING_SHEETS_KEY = "judging_sheets"


@register_store
class JsonFileStore(ScoreRecordStore):
    """Store keeping every record in one JSON document on disk.

    The file holds two lists, ``competitions`` and ``judging_sheets``. It is
    read once on first use and rewritten in full after each change, through
    a temporary file and an atomic rename so a crash never leaves half a
    document behind.
    """

    name = "json"

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._competitions: list[dict] | None = None
        self._sheets: list[dict] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "JsonFileStore":
        return cls(settings.store_path)

    def _load(self) -> None:
        if self._competitions is not None:
            return
        if not self.path.exists():
            self._competitions, self._sheets = [], []
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Could not read store file {self.path}: {e}") from e
        self._competitions = data.get(COMPETITIONS_KEY, [])
        self._sheets = data.get(JUDGING_SHEETS_KEY, [])
        logger.debug(
            "Loaded %d competitions and %d sheets from %s",
            len(self._competitions), len(self._sheets), self.path,
        )

    def _save(self, competitions: list[dict], sheets: list[dict]) -> None:
        """Write both lists to disk, then adopt them as the cached state."""
        document = {
            COMPETITIONS_KEY: competitions,
            JUDGING_SHEETS_KEY: sheets,
        }
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreError(f"Could not write store file {self.path}: {e}") from e
        self._competitions, self._sheets = competitions, sheets

    def list_competitions(self) -> list[Competition]:
        self._load()
        return [Competition.from_dict(c) for c in self._competitions]

    def get_competition(self, competition_id: str) -> Competition | None:
        self._load()
        for data in self._competitions:
            if data["id"] == competition_id:
                return Competition.from_dict(data)
        return None

    def save_competition(self, competition: Competition) -> None:
        self._load()
        data = competition.to_dict()
        competitions = list(self._competitions)
        for i, existing in enumerate(competitions):
            if existing["id"] == competition.id:
                competitions[i] = data
                break
        else:
            competitions.append(data)
        self._save(competitions, self._sheets)

    def delete_competition(self, competition_id: str) -> None:
        self._load()
        self._save(
            [c for c in self._competitions if c["id"] != competition_id],
            [s for s in self._sheets if s["competition_id"] != competition_id],
        )

    @staticmethod
    def _matches(data: dict, competition_id: str, judge_id: str, role: CompetitorRole) -> bool:
        return (
            data["competition_id"] == competition_id
            and data["judge_id"] == judge_id
            and data["role"] == role.value
        )

    def get_judging_sheet(
        self, competition_id: str, judge_id: str, role: CompetitorRole
    ) -> ScoreSheet | None:
        self._load()
        for data in self._sheets:
            if self._matches(data, competition_id, judge_id, role):
                return ScoreSheet.from_dict(data)
        return None

    def save_judging_sheet(self, sheet: ScoreSheet) -> None:
        self._load()
        data = sheet.to_dict()
        sheets = list(self._sheets)
        for i, existing in enumerate(sheets):
            if self._matches(existing, sheet.competition_id, sheet.judge_id, sheet.role):
                sheets[i] = data
                break
        else:
            sheets.append(data)
        self._save(self._competitions, sheets)

    def get_judging_sheets(
        self, competition_id: str, role: CompetitorRole | None = None
    ) -> list[ScoreSheet]:
        self._load()
        return [
            ScoreSheet.from_dict(data)
            for data in self._sheets
            if data["competition_id"] == competition_id
            and (role is None or data["role"] == role.value)
        ]
