"""Store backed by the Firebase Realtime Database REST API."""

import logging
from typing import Any

import httpx

from judging.config import Settings
from judging.models import Competition, CompetitorRole, ScoreSheet
from judging.stores import register_store
from judging.stores.base import ScoreRecordStore, StoreError

logger = logging.getLogger(__name__)


@register_store
class FirebaseStore(ScoreRecordStore):
    """Store talking to a Firebase Realtime Database over HTTPS.

    Records live under two trees:
        competitions/<competition_id>
        judging_sheets/<competition_id>/<judge_id>_<role>

    Keeping sheets nested under their competition makes the cascading delete
    a single request. The database returns JSON ``null`` for missing paths.

    Expected base URL format:
        https://<project>-default-rtdb.firebaseio.com
    """

    name = "firebase"

    def __init__(
        self,
        base_url: str = "",
        auth: str = "",
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self.auth = auth
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseStore":
        if not settings.firebase_url:
            raise StoreError("firebase_url must be set to use the firebase store")
        return cls(
            base_url=settings.firebase_url,
            auth=settings.firebase_auth,
            timeout=settings.http_timeout_seconds,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        params = {"auth": self.auth} if self.auth else None
        try:
            response = self._client.request(method, f"/{path}.json", params=params, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"HTTP error {e.response.status_code} on {method} {path}"
            ) from e
        except httpx.RequestError as e:
            raise StoreError(f"Error reaching store on {method} {path}: {e}") from e

        logger.debug("%s %s -> %d", method, path, response.status_code)
        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _sheet_path(competition_id: str, judge_id: str, role: CompetitorRole) -> str:
        return f"judging_sheets/{competition_id}/{judge_id}_{role.value}"

    def list_competitions(self) -> list[Competition]:
        data = self._request("GET", "competitions") or {}
        return [Competition.from_dict(c) for c in data.values()]

    def get_competition(self, competition_id: str) -> Competition | None:
        data = self._request("GET", f"competitions/{competition_id}")
        return Competition.from_dict(data) if data is not None else None

    def save_competition(self, competition: Competition) -> None:
        self._request("PUT", f"competitions/{competition.id}", competition.to_dict())

    def delete_competition(self, competition_id: str) -> None:
        self._request("DELETE", f"competitions/{competition_id}")
        self._request("DELETE", f"judging_sheets/{competition_id}")

    def get_judging_sheet(
        self, competition_id: str, judge_id: str, role: CompetitorRole
    ) -> ScoreSheet | None:
        data = self._request("GET", self._sheet_path(competition_id, judge_id, role))
        return ScoreSheet.from_dict(data) if data is not None else None

    def save_judging_sheet(self, sheet: ScoreSheet) -> None:
        self._request(
            "PUT",
            self._sheet_path(sheet.competition_id, sheet.judge_id, sheet.role),
            sheet.to_dict(),
        )

    def get_judging_sheets(
        self, competition_id: str, role: CompetitorRole | None = None
    ) -> list[ScoreSheet]:
        data = self._request("GET", f"judging_sheets/{competition_id}") or {}
        sheets = [ScoreSheet.from_dict(s) for s in data.values()]
        if role is not None:
            sheets = [s for s in sheets if s.role == role]
        return sheets
