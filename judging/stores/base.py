"""Abstract base class for score record stores."""

from abc import ABC, abstractmethod
from typing import Self

from judging.config import Settings
from judging.models import Competition, CompetitorRole, ScoreSheet


class StoreError(Exception):
    """Raised when a store backend cannot read or write a record.

    Missing records are not errors; lookups return None instead.
    """
    pass


class ScoreRecordStore(ABC):
    """Abstract base class for durable storage of competitions and sheets.

    Each backend keeps one record per competition and one sheet per
    (competition, judge, role). Backends are registered via the
    @register_store decorator in judging/stores/__init__.py and constructed
    with from_settings(). Stores are context managers; leaving the block
    calls close().
    """

    name: str = ""

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: Settings) -> Self:
        """Build a store from application settings."""
        pass

    @abstractmethod
    def list_competitions(self) -> list[Competition]:
        pass

    @abstractmethod
    def get_competition(self, competition_id: str) -> Competition | None:
        pass

    @abstractmethod
    def save_competition(self, competition: Competition) -> None:
        pass

    @abstractmethod
    def delete_competition(self, competition_id: str) -> None:
        """Delete a competition and every judging sheet that belongs to it."""
        pass

    @abstractmethod
    def get_judging_sheet(
        self, competition_id: str, judge_id: str, role: CompetitorRole
    ) -> ScoreSheet | None:
        pass

    @abstractmethod
    def save_judging_sheet(self, sheet: ScoreSheet) -> None:
        """Insert or replace the sheet keyed by (competition, judge, role)."""
        pass

    @abstractmethod
    def get_judging_sheets(
        self, competition_id: str, role: CompetitorRole | None = None
    ) -> list[ScoreSheet]:
        """All sheets for a competition, optionally limited to one role."""
        pass

    def close(self) -> None:
        """Release any connections held by the backend."""
        pass

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
