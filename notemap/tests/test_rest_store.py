import io
import json
import socket
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs, urlsplit

import pytest

from notemap.errors import FetchFailure, MutationFailure
from notemap.models import SessionContext
from notemap.session import MindMapSession, NoticeLevel
from notemap.store import rest
from notemap.store.rest import RestNoteStore, RestStoreConfig


class FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class Recorder:
    def __init__(self, payload=None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.requests = []

    def __call__(self, req, timeout=None):
        self.requests.append((req, timeout))
        if self.error is not None:
            raise self.error
        body = b"" if self.payload is None else json.dumps(self.payload).encode("utf-8")
        return FakeResponse(body)


@pytest.fixture
def client() -> RestNoteStore:
    return RestNoteStore(RestStoreConfig(url="https://db.example.com/", api_key="secret", timeout_s=3.0))


def _query(req) -> dict[str, list[str]]:
    return parse_qs(urlsplit(req.full_url).query)


def test_list_notes_request(monkeypatch, client) -> None:
    rec = Recorder([
        {"id": "n1", "title": "One", "content": "", "tags": ["x"], "linked_notes": ["n2"]},
        {"title": "no id"},
    ])
    monkeypatch.setattr(rest, "urlopen", rec)

    notes = client.list_notes("user-1")

    req, timeout = rec.requests[0]
    assert req.full_url.startswith("https://db.example.com/rest/v1/notes?")
    assert _query(req) == {"select": ["*"], "user_id": ["eq.user-1"], "order": ["created_at.desc"]}
    assert req.get_method() == "GET"
    assert req.get_header("Apikey") == "secret"
    assert req.get_header("Authorization") == "Bearer secret"
    assert timeout == 3.0
    assert [n.id for n in notes] == ["n1"]
    assert notes[0].linked_notes == ["n2"]


def test_get_linked_notes(monkeypatch, client) -> None:
    rec = Recorder([{"linked_notes": ["b", "c"]}])
    monkeypatch.setattr(rest, "urlopen", rec)

    assert client.get_linked_notes("user-1", "a") == ["b", "c"]
    assert _query(rec.requests[0][0]) == {"select": ["linked_notes"], "id": ["eq.a"], "user_id": ["eq.user-1"]}


def test_get_linked_notes_requires_one_row(monkeypatch, client) -> None:
    monkeypatch.setattr(rest, "urlopen", Recorder([]))
    with pytest.raises(FetchFailure):
        client.get_linked_notes("user-1", "a")


def test_update_sends_patch(monkeypatch, client) -> None:
    rec = Recorder()
    monkeypatch.setattr(rest, "urlopen", rec)

    client.update_linked_notes("user-1", "a", ["b"], "2024-05-01T00:00:00+00:00")

    req, _ = rec.requests[0]
    assert req.get_method() == "PATCH"
    assert _query(req) == {"id": ["eq.a"], "user_id": ["eq.user-1"]}
    assert json.loads(req.data) == {"linked_notes": ["b"], "updated_at": "2024-05-01T00:00:00+00:00"}
    assert req.get_header("Prefer") == "return=minimal"


def test_http_errors_map_to_store_failures(monkeypatch, client) -> None:
    error = HTTPError("https://db.example.com", 503, "Service Unavailable", {}, None)
    monkeypatch.setattr(rest, "urlopen", Recorder(error=error))

    with pytest.raises(FetchFailure, match="503"):
        client.list_notes("user-1")
    with pytest.raises(MutationFailure, match="503"):
        client.update_linked_notes("user-1", "a", [], "x")


def test_connection_error_is_fetch_failure(monkeypatch, client) -> None:
    monkeypatch.setattr(rest, "urlopen", Recorder(error=URLError("refused")))
    with pytest.raises(FetchFailure, match="refused"):
        client.list_notes("user-1")


def test_invalid_json_is_fetch_failure(monkeypatch, client) -> None:
    def broken(req, timeout=None):
        return FakeResponse(b"<html>")

    monkeypatch.setattr(rest, "urlopen", broken)
    with pytest.raises(FetchFailure):
        client.list_notes("user-1")


class TimingOutResponse(FakeResponse):
    def read(self, *args):
        raise socket.timeout("timed out")


def _timing_out(req, timeout=None):
    return TimingOutResponse(b"")


def test_read_timeout_maps_to_store_failures(monkeypatch, client) -> None:
    monkeypatch.setattr(rest, "urlopen", _timing_out)

    with pytest.raises(FetchFailure, match="timed out"):
        client.list_notes("user-1")
    with pytest.raises(MutationFailure, match="timed out"):
        client.update_linked_notes("user-1", "a", [], "x")


def test_read_timeout_empties_session_with_notice(monkeypatch, client) -> None:
    monkeypatch.setattr(rest, "urlopen", _timing_out)
    notices = []
    session = MindMapSession(client, SessionContext("user-1"), notify=notices.append)

    assert session.refresh()
    assert len(session.graph) == 0
    assert notices[-1].level is NoticeLevel.ERROR
    assert "timed out" in notices[-1].message
