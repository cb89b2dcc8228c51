"""REST table-store client (PostgREST-style ``/rest/v1/<table>`` endpoints).

Rows are selected with ``column=eq.value`` query filters and updated with
``PATCH``. Every request is scoped to the session's user id.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..errors import FetchFailure, MutationFailure, NoteStoreError
from ..models import NoteFilters, NoteRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestStoreConfig:
    url: str
    api_key: str
    table: str = "notes"
    timeout_s: float = 10.0


def _eq(value: str) -> str:
    return f"eq.{value}"


class RestNoteStore:
    """Minimal client for a remote notes table."""

    def __init__(self, cfg: RestStoreConfig) -> None:
        self._cfg = cfg
        self._base = f"{cfg.url.rstrip('/')}/rest/v1/{quote(cfg.table)}"

    def _request(self, method: str, params: dict[str, str], body: dict[str, Any] | None = None) -> Any:
        url = f"{self._base}?{urlencode(params)}"
        headers = {
            "apikey": self._cfg.api_key,
            "Authorization": f"Bearer {self._cfg.api_key}",
            "Accept": "application/json",
        }
        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"
            headers["Prefer"] = "return=minimal"

        req = Request(url, data=data, method=method, headers=headers)
        try:
            with urlopen(req, timeout=self._cfg.timeout_s) as resp:
                raw = resp.read().decode("utf-8")
        except HTTPError as e:
            raise NoteStoreError(f"Note store HTTP error {e.code}: {e.reason}") from e
        except URLError as e:
            raise NoteStoreError(f"Note store connection error: {e.reason}") from e
        except OSError as e:
            # Socket timeouts and resets during the read are not URLErrors.
            raise NoteStoreError(f"Note store connection error: {e}") from e

        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise NoteStoreError(f"Note store returned invalid JSON: {e}") from e

    def _get(self, params: dict[str, str]) -> list[dict[str, Any]]:
        try:
            payload = self._request("GET", params)
        except NoteStoreError as e:
            raise FetchFailure(str(e)) from e
        if not isinstance(payload, list):
            raise FetchFailure("Note store returned an unexpected payload")
        return [row for row in payload if isinstance(row, dict)]

    def list_notes(self, user_id: str, filters: NoteFilters | None = None) -> list[NoteRecord]:
        # Filtering stays client-side; the graph builder applies ``filters``.
        rows = self._get({"select": "*", "user_id": _eq(user_id), "order": "created_at.desc"})
        notes = []
        for row in rows:
            if row.get("id") is None:
                logger.warning("Ignoring note row without id")
                continue
            notes.append(NoteRecord.from_dict(row))
        return notes

    def get_linked_notes(self, user_id: str, note_id: str) -> list[str]:
        rows = self._get({"select": "linked_notes", "id": _eq(note_id), "user_id": _eq(user_id)})
        if len(rows) != 1:
            raise FetchFailure(f"Note not found: {note_id}")
        return [str(n) for n in (rows[0].get("linked_notes") or [])]

    def update_linked_notes(self, user_id: str, note_id: str, linked_notes: list[str], updated_at: str) -> None:
        try:
            self._request(
                "PATCH",
                {"id": _eq(note_id), "user_id": _eq(user_id)},
                {"linked_notes": list(linked_notes), "updated_at": updated_at},
            )
        except NoteStoreError as e:
            raise MutationFailure(str(e)) from e
