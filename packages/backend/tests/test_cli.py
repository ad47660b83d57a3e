"""CLI tests — commands run through Click's CliRunner.

Learn: The CLI only talks HTTP, so _client() is swapped for an httpx
client over MockTransport. Each test records the requests the command
made and returns canned responses.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from relayboard.cli import main as cli
from relayboard.services.webhook_service import SIGNATURE_HEADER, WebhookService


@pytest.fixture()
def recorded(monkeypatch):
    """Install a fake server; returns (requests seen, responses to serve)."""
    seen: list[httpx.Request] = []
    responses: dict[str, httpx.Response] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return responses.get(request.url.path, httpx.Response(404, json={"detail": "Not Found"}))

    def fake_client() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url="http://test",
            headers={"X-API-Key": "k"},
        )

    monkeypatch.setattr(cli, "_client", fake_client)
    return seen, responses


def test_messages_lists_page(recorded):
    seen, responses = recorded
    responses["/api/messages"] = httpx.Response(200, json={
        "user_id": "42",
        "count": 2,
        "size": 2,
        "cursor": 0,
        "next_cursor": 2,
        "messages": [
            {"for_user_id": "42", "favorite_events": []},
            {"for_user_id": "42", "follow_events": []},
        ],
    })

    result = CliRunner().invoke(cli.main, ["messages", "42", "--size", "2"])

    assert result.exit_code == 0, result.output
    assert "Messages for 42 (2)" in result.output
    assert "favorite_events" in result.output
    assert "--cursor 2" in result.output
    params = seen[0].url.params
    assert params["user_id"] == "42"
    assert params["size"] == "2"
    assert params["cursor"] == "0"


def test_messages_json_output(recorded):
    _, responses = recorded
    page = {"user_id": "42", "count": 0, "size": 25, "cursor": 0, "next_cursor": None, "messages": []}
    responses["/api/messages"] = httpx.Response(200, json=page)

    result = CliRunner().invoke(cli.main, ["messages", "42", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.output) == page


def test_messages_empty(recorded):
    _, responses = recorded
    responses["/api/messages"] = httpx.Response(200, json={
        "user_id": "42", "count": 0, "size": 25, "cursor": 0, "next_cursor": None, "messages": [],
    })
    result = CliRunner().invoke(cli.main, ["messages", "42"])
    assert result.exit_code == 0
    assert "No messages found." in result.output


def test_messages_unauthorized(recorded):
    _, responses = recorded
    responses["/api/messages"] = httpx.Response(401, json={"detail": "Unauthorized"})
    result = CliRunner().invoke(cli.main, ["messages", "42"])
    assert result.exit_code == 1
    assert "RELAYBOARD_API_KEY" in result.output


def test_send_event_posts_file(recorded, tmp_path):
    seen, responses = recorded
    responses["/webhooks/twitter"] = httpx.Response(200, json={"status": "accepted"})
    event = {"for_user_id": "42", "tweet_create_events": [{"id": "1"}]}
    path = tmp_path / "event.json"
    path.write_text(json.dumps(event))

    result = CliRunner().invoke(cli.main, ["send-event", str(path)])

    assert result.exit_code == 0, result.output
    assert "Event accepted" in result.output
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == event


def test_send_event_rejects_invalid_json(recorded, tmp_path):
    seen, _ = recorded
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    result = CliRunner().invoke(cli.main, ["send-event", str(path)])

    assert result.exit_code == 1
    assert "not valid JSON" in result.output
    assert seen == []


def test_send_event_reports_rejection(recorded, tmp_path):
    _, responses = recorded
    responses["/webhooks/twitter"] = httpx.Response(403, json={"detail": "Invalid signature"})
    path = tmp_path / "event.json"
    path.write_text('{"for_user_id": "1"}')

    result = CliRunner().invoke(cli.main, ["send-event", str(path)])

    assert result.exit_code == 1
    assert "403" in result.output


def test_send_event_signs_with_consumer_secret(recorded, tmp_path, monkeypatch):
    seen, responses = recorded
    responses["/webhooks/twitter"] = httpx.Response(200, json={"status": "accepted"})
    monkeypatch.setenv("RELAYBOARD_TWITTER_CONSUMER_SECRET", "s3cret")
    path = tmp_path / "event.json"
    path.write_text('{"for_user_id": "1"}')

    result = CliRunner().invoke(cli.main, ["send-event", str(path)])

    assert result.exit_code == 0, result.output
    request = seen[0]
    expected = WebhookService("s3cret").sign(request.content)
    assert request.headers[SIGNATURE_HEADER] == expected


def test_send_event_unsigned_without_secret(recorded, tmp_path, monkeypatch):
    seen, responses = recorded
    responses["/webhooks/twitter"] = httpx.Response(200, json={"status": "accepted"})
    monkeypatch.delenv("RELAYBOARD_TWITTER_CONSUMER_SECRET", raising=False)
    path = tmp_path / "event.json"
    path.write_text('{"for_user_id": "1"}')

    CliRunner().invoke(cli.main, ["send-event", str(path)])

    assert SIGNATURE_HEADER not in seen[0].headers
