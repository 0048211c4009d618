"""In-memory store, mainly for tests and single-process use."""

from judging.config import Settings
from judging.models import Competition, CompetitorRole, ScoreSheet
from judging.stores import register_store
from judging.stores.base import ScoreRecordStore


@register_store
class InMemoryStore(ScoreRecordStore):
    """Dict-backed store.

    Records are held as plain dicts and rebuilt on every read, so callers
    never share mutable objects with the store.
    """

    name = "memory"

    def __init__(self):
        self._competitions: dict[str, dict] = {}
        self._sheets: dict[tuple[str, str, str], dict] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "InMemoryStore":
        return cls()

    def list_competitions(self) -> list[Competition]:
        return [Competition.from_dict(c) for c in self._competitions.values()]

    def get_competition(self, competition_id: str) -> Competition | None:
        data = self._competitions.get(competition_id)
        return Competition.from_dict(data) if data is not None else None

    def save_competition(self, competition: Competition) -> None:
        self._competitions[competition.id] = competition.to_dict()

    def delete_competition(self, competition_id: str) -> None:
        self._competitions.pop(competition_id, None)
        self._sheets = {
            key: sheet for key, sheet in self._sheets.items()
            if key[0] != competition_id
        }

    def get_judging_sheet(
        self, competition_id: str, judge_id: str, role: CompetitorRole
    ) -> ScoreSheet | None:
        data = self._sheets.get((competition_id, judge_id, role.value))
        return ScoreSheet.from_dict(data) if data is not None else None

    def save_judging_sheet(self, sheet: ScoreSheet) -> None:
        self._sheets[(sheet.competition_id, sheet.judge_id, sheet.role.value)] = sheet.to_dict()

    def get_judging_sheets(
        self, competition_id: str, role: CompetitorRole | None = None
    ) -> list[ScoreSheet]:
        return [
            ScoreSheet.from_dict(data)
            for (cid, _, sheet_role), data in self._sheets.items()
            if cid == competition_id and (role is None or sheet_role == role.value)
        ]
