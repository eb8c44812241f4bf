"""
Module: test_queue_cli.py
Description: Integration tests for the operator queue CLI.

Runs the CLI against a temporary queue directory with the collector
mocked by pytest-httpx.
"""

import json

import pytest

from actionlog import cli
from actionlog.storage.local import FileStorage

from conftest import PRIMARY_URL, QUEUE_KEY


@pytest.fixture
def cli_args(tmp_path):
    def build(*command):
        return ["--queue-dir", str(tmp_path), "--endpoint", PRIMARY_URL, *command]
    return build


@pytest.fixture
def fast_retries(monkeypatch):
    """Make the CLI's queues retry without waiting."""
    monkeypatch.setattr(cli.settings, "max_retries", 0)
    monkeypatch.setattr(cli.settings, "drain_pacing", 0.0)


class TestQueueCli:
    """Test cases for actionlog-queue commands."""

    def test_status_on_empty_queue(self, cli_args, capsys):
        assert cli.main(cli_args("status")) == 0

        out = capsys.readouterr().out
        assert '"queued_count": 0' in out

    def test_record_delivered(self, cli_args, httpx_mock):
        httpx_mock.add_response(method="POST", url=PRIMARY_URL, status_code=200)

        assert cli.main(cli_args("record", "--action", "page_visit", "--extra", '{"page": "/events"}')) == 0

        body = json.loads(httpx_mock.get_request().content)
        assert body["action"] == "page_visit"
        assert body["userIdentity"] == "anonymous"

    def test_record_failure_is_queued(self, cli_args, tmp_path, httpx_mock, fast_retries):
        httpx_mock.add_response(method="POST", url=PRIMARY_URL, status_code=500)

        assert cli.main(cli_args("record", "--action", "page_visit")) == 1

        saved = json.loads(FileStorage(str(tmp_path)).get_item(QUEUE_KEY))
        assert [entry["action"] for entry in saved] == ["page_visit"]

    def test_record_rejects_bad_json(self, cli_args):
        assert cli.main(cli_args("record", "--action", "page_visit", "--extra", "{oops")) == 2

    def test_drain_delivers_queued_entries(self, cli_args, tmp_path, httpx_mock, fast_retries):
        FileStorage(str(tmp_path)).set_item(QUEUE_KEY, json.dumps([
            {"timestamp": "2024-01-15T10:30:00.000Z", "userIdentity": "anonymous",
             "action": "page_visit", "extraInfo": "{}"},
        ]))
        httpx_mock.add_response(method="POST", url=PRIMARY_URL, status_code=200)

        assert cli.main(cli_args("drain")) == 0
        assert FileStorage(str(tmp_path)).get_item(QUEUE_KEY) == "[]"

    def test_clear_requires_confirmation(self, cli_args, tmp_path):
        FileStorage(str(tmp_path)).set_item(QUEUE_KEY, json.dumps([
            {"timestamp": "2024-01-15T10:30:00.000Z", "userIdentity": "anonymous",
             "action": "page_visit", "extraInfo": "{}"},
        ]))

        assert cli.main(cli_args("clear")) == 2
        assert len(json.loads(FileStorage(str(tmp_path)).get_item(QUEUE_KEY))) == 1

        assert cli.main(cli_args("clear", "--yes")) == 0
        assert FileStorage(str(tmp_path)).get_item(QUEUE_KEY) == "[]"
