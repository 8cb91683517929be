import requests

import api
from models import AgendaItem, Committee, DraftProtocol, MemberStatus, MemberType, ProtocolMember


class _FakeResponse:
    def __init__(self, payload, status_code=201):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._payload


def _draft() -> DraftProtocol:
    return DraftProtocol(
        number=98.1,
        due_date="2025-05-04",
        committee=Committee(id="c-1", name="Finance"),
        members=[ProtocolMember(name="Dana", type=MemberType.EXTERNAL, status=MemberStatus.PRESENT)],
        agenda_items=[AgendaItem(title="Budget"), AgendaItem(title="Hiring", display_order=5)],
    )


def test_build_protocol_rows() -> None:
    rows = api.build_protocol_rows(_draft())
    assert rows["protocol"] == {"number": "98.1", "due_date": "2025-05-04", "committee_id": "c-1"}
    assert [item["display_order"] for item in rows["agenda_items"]] == [1, 5]
    assert rows["agenda_items"][0]["topic_content"] == ""
    assert rows["members"] == [{"name": "Dana", "type": 2, "status": 2}]


def test_create_protocol_inserts_children(monkeypatch) -> None:
    calls = []

    def fake_post(url, headers, json, timeout):
        calls.append((url, json))
        if url.endswith("/protocols"):
            return _FakeResponse([{"id": "p-1", "number": "98.1"}])
        return _FakeResponse(json)

    monkeypatch.setattr(api.config, "PROTOCOLS_API_URL", "https://db.example.test")
    monkeypatch.setattr(api.config, "PROTOCOLS_API_KEY", "secret")
    monkeypatch.setattr(api.requests, "post", fake_post)

    result = api.create_protocol(_draft())

    assert result == {"success": True, "data": {"id": "p-1", "number": "98.1"}}
    assert [url.rsplit("/", 1)[1] for url, _ in calls] == ["protocols", "agenda_items", "protocol_members"]
    assert all(row["protocol_id"] == "p-1" for row in calls[1][1])
    assert calls[2][1][0]["protocol_id"] == "p-1"


def test_create_protocol_http_error(monkeypatch) -> None:
    monkeypatch.setattr(api.config, "PROTOCOLS_API_URL", "https://db.example.test")
    monkeypatch.setattr(api.requests, "post", lambda *args, **kwargs: _FakeResponse({}, status_code=409))

    result = api.create_protocol(_draft())
    assert result["success"] is False
    assert "409" in result["error"]


def test_create_protocol_network_error(monkeypatch) -> None:
    def fake_post(*args, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(api.config, "PROTOCOLS_API_URL", "https://db.example.test")
    monkeypatch.setattr(api.requests, "post", fake_post)

    result = api.create_protocol(_draft())
    assert result["success"] is False
    assert "Could not connect" in result["error"]


def test_create_protocol_unexpected_payload(monkeypatch) -> None:
    monkeypatch.setattr(api.config, "PROTOCOLS_API_URL", "https://db.example.test")
    monkeypatch.setattr(api.requests, "post", lambda *args, **kwargs: _FakeResponse([]))

    result = api.create_protocol(_draft())
    assert result["success"] is False
    assert "unexpected format" in result["error"]


def test_create_protocol_not_configured(monkeypatch) -> None:
    monkeypatch.setattr(api.config, "PROTOCOLS_API_URL", "")
    assert api.create_protocol(_draft())["success"] is False


def test_create_protocol_rolls_back_after_child_failure(monkeypatch) -> None:
    posted = []
    deleted = []

    def fake_post(url, headers, json, timeout):
        table = url.rsplit("/", 1)[1]
        posted.append(table)
        if table == "protocols":
            return _FakeResponse([{"id": "p-1", "number": "98.1"}])
        return _FakeResponse({}, status_code=500)

    def fake_delete(url, headers, params, timeout):
        deleted.append((url.rsplit("/", 1)[1], params))
        return _FakeResponse([], status_code=204)

    monkeypatch.setattr(api.config, "PROTOCOLS_API_URL", "https://db.example.test")
    monkeypatch.setattr(api.requests, "post", fake_post)
    monkeypatch.setattr(api.requests, "delete", fake_delete)

    first = api.create_protocol(_draft())
    second = api.create_protocol(_draft())

    assert first["success"] is False and second["success"] is False
    assert "500" in first["error"]
    assert posted == ["protocols", "agenda_items", "protocols", "agenda_items"]
    assert deleted.count(("protocols", {"id": "eq.p-1"})) == 2
    assert ("agenda_items", {"protocol_id": "eq.p-1"}) in deleted


def test_create_protocol_rollback_failure_keeps_original_error(monkeypatch) -> None:
    def fake_post(url, headers, json, timeout):
        if url.endswith("/protocols"):
            return _FakeResponse([{"id": "p-2"}])
        return _FakeResponse({}, status_code=503)

    def fake_delete(*args, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(api.config, "PROTOCOLS_API_URL", "https://db.example.test")
    monkeypatch.setattr(api.requests, "post", fake_post)
    monkeypatch.setattr(api.requests, "delete", fake_delete)

    result = api.create_protocol(_draft())
    assert result["success"] is False
    assert "503" in result["error"]
