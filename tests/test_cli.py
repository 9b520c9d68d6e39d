"""Tests for the command-line interface.

WHY: The CLI is how operators drive the client from scripts, so exit
codes and stdout/stderr separation matter as much as the calls made.

HOW: QencodeClient is replaced with a fake that records calls and
returns canned results (or raises). main() is invoked with explicit
argv; output is captured with capsys.

RULES:
- The real client and network are never used
- JSON results go to stdout, status and errors to stderr
"""

from __future__ import annotations

import json

import pytest

from stubs import EXPECTED_EXPIRE
from qencode_client import cli
from qencode_client.api.client import RequestError, TransportError
from qencode_client.api.models import AccessToken, CreateTaskResponse, StartTaskResponse


class FakeClient:
    """Stands in for QencodeClient inside the CLI."""

    def __init__(self, base_url=None, token_error=None, create_error_code=0):
        self.base_url = base_url
        self.calls = []
        self.token_error = token_error
        self.create_error_code = create_error_code

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def get_token(self, api_key):
        self.calls.append(("get_token", api_key))
        if self.token_error is not None:
            raise self.token_error
        return AccessToken(token="access-token", expire=EXPECTED_EXPIRE)

    async def create_task(self, token):
        self.calls.append(("create_task", token))
        return CreateTaskResponse(
            error=self.create_error_code,
            upload_url="https://storage.qencode.com/v1/upload_file",
            task_token="task-token",
        )

    async def start_task(self, task_token, payload, query):
        self.calls.append(("start_task", task_token, payload, query))
        return StartTaskResponse(error=0, status_url="https://api.qencode.com/v1/status")


@pytest.fixture
def fake(monkeypatch):
    """Install a FakeClient and return a function to configure it."""
    state = {"kwargs": {}, "instance": None}

    def factory(base_url=None):
        state["instance"] = FakeClient(base_url=base_url, **state["kwargs"])
        return state["instance"]

    monkeypatch.setattr(cli, "QencodeClient", factory)
    monkeypatch.delenv("QENCODE_API_KEY", raising=False)
    return state


@pytest.fixture
def query_file(tmp_path):
    path = tmp_path / "query.json"
    path.write_text(json.dumps({"query": {"source": "https://example.com/in.mp4", "format": []}}))
    return path


class TestTokenCommand:
    def test_prints_token_json(self, fake, capsys):
        cli.main(["token", "--api-key", "key-1"])
        out = json.loads(capsys.readouterr().out)
        assert out == {"token": "access-token", "expire": "2021-09-19T01:35:57"}
        assert fake["instance"].calls == [("get_token", "key-1")]

    def test_api_key_from_environment(self, fake, monkeypatch, capsys):
        monkeypatch.setenv("QENCODE_API_KEY", "env-key")
        cli.main(["token"])
        assert fake["instance"].calls == [("get_token", "env-key")]

    def test_missing_api_key_exits_1(self, fake, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["token"])
        assert excinfo.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "QENCODE_API_KEY" in captured.err

    def test_request_error_prints_status_and_body(self, fake, capsys):
        fake["kwargs"] = {"token_error": RequestError("error getting token", 401, b"bad key")}
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["token", "--api-key", "k"])
        assert excinfo.value.code == 1
        err = capsys.readouterr().err
        assert "[401 Unauthorized]: error getting token" in err
        assert "bad key" in err

    def test_transport_error_exits_1(self, fake, capsys):
        fake["kwargs"] = {"token_error": TransportError("POST failed")}
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["token", "--api-key", "k"])
        assert excinfo.value.code == 1

    def test_base_url_is_passed_to_client(self, fake, capsys):
        cli.main(["--base-url", "https://stub.test", "token", "--api-key", "k"])
        assert fake["instance"].base_url == "https://stub.test"


class TestCreateTaskCommand:
    def test_prints_response(self, fake, capsys):
        cli.main(["create-task", "--token", "tok"])
        out = json.loads(capsys.readouterr().out)
        assert out["task_token"] == "task-token"
        assert fake["instance"].calls == [("create_task", "tok")]

    def test_non_zero_error_code_exits_2(self, fake, capsys):
        fake["kwargs"] = {"create_error_code": 7}
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["create-task", "--token", "tok"])
        assert excinfo.value.code == 2
        captured = capsys.readouterr()
        assert json.loads(captured.out)["error"] == 7
        assert "error code 7" in captured.err


class TestStartTaskCommand:
    def test_sends_query_document(self, fake, query_file, capsys):
        cli.main([
            "start-task",
            "--task-token", "task-token",
            "--query-file", str(query_file),
            "--payload", '{"id": 1}',
        ])
        name, task_token, payload, query = fake["instance"].calls[0]
        assert (name, task_token, payload) == ("start_task", "task-token", '{"id": 1}')
        assert query == json.loads(query_file.read_text())
        out = json.loads(capsys.readouterr().out)
        assert out["status_url"] == "https://api.qencode.com/v1/status"

    def test_missing_query_file_exits_1(self, fake, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["start-task", "--task-token", "t", "--query-file", str(tmp_path / "nope.json")])
        assert excinfo.value.code == 1

    def test_query_without_query_key_exits_1(self, fake, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text('{"source": "x"}')
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["start-task", "--task-token", "t", "--query-file", str(path)])
        assert excinfo.value.code == 1
        assert '"query" key' in capsys.readouterr().err


class TestEncodeCommand:
    def test_chains_all_three_calls(self, fake, query_file, capsys):
        cli.main(["encode", "--api-key", "k", "--query-file", str(query_file)])
        calls = fake["instance"].calls
        assert [c[0] for c in calls] == ["get_token", "create_task", "start_task"]
        assert calls[1] == ("create_task", "access-token")
        assert calls[2][1] == "task-token"
        out = json.loads(capsys.readouterr().out)
        assert out == {"error": 0, "status_url": "https://api.qencode.com/v1/status"}

    def test_stops_when_create_task_reports_error(self, fake, query_file, capsys):
        fake["kwargs"] = {"create_error_code": 3}
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["encode", "--api-key", "k", "--query-file", str(query_file)])
        assert excinfo.value.code == 2
        assert [c[0] for c in fake["instance"].calls] == ["get_token", "create_task"]


class TestParser:
    def test_subcommand_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_create_task_requires_token(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["create-task"])
