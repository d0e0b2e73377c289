import json
import subprocess
from types import SimpleNamespace

import pytest

from core.errors import CliError, ErrorCode, IssueLinkError, SourceError
from infrastructure import bd_cli
from infrastructure.bd_cli import BdCliWriter, extract_json


def test_extract_json_skips_warnings_and_braces_in_strings():
    output = 'warning: daemon not running\n{"id": "bd-1", "title": "use {braces} \\"quoted\\""}\ntrailing'
    payload = extract_json(output)
    assert json.loads(payload)["title"] == 'use {braces} "quoted"'


def test_extract_json_none_without_object():
    assert extract_json("nothing here") is None
    assert extract_json('{"unterminated": 1') is None


def test_create_links_parent(monkeypatch):
    calls = []

    def fake_run(cmd, capture_output, text, timeout):
        calls.append(cmd)
        if cmd[3] == "create":
            body = json.dumps({"id": "bd-7", "title": "New", "status": "open", "priority": 2})
            return SimpleNamespace(returncode=0, stdout=body, stderr="")
        return SimpleNamespace(returncode=0, stdout="", stderr="")

    monkeypatch.setattr(bd_cli.subprocess, "run", fake_run)
    writer = BdCliWriter(db_path="/tmp/beads.db")
    issue = writer.create("New", parent_id="bd-1")
    assert issue.id == "bd-7"
    assert calls[0][:4] == ["bd", "--db", "/tmp/beads.db", "create"]
    assert calls[1] == ["bd", "--db", "/tmp/beads.db", "dep", "add", "bd-7", "bd-1", "--type", "parent-child"]


def test_create_requires_title():
    with pytest.raises(ValueError):
        BdCliWriter().create("   ")


def test_missing_binary(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("bd")

    monkeypatch.setattr(bd_cli.subprocess, "run", fake_run)
    with pytest.raises(CliError) as exc:
        BdCliWriter().create("x")
    assert exc.value.code is ErrorCode.CLI_NOT_FOUND


def test_timeout_and_failure(monkeypatch):
    def timeout_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, 1)

    monkeypatch.setattr(bd_cli.subprocess, "run", timeout_run)
    with pytest.raises(CliError, match="timed out"):
        BdCliWriter(timeout=1).create("x")

    monkeypatch.setattr(
        bd_cli.subprocess, "run", lambda cmd, **kwargs: SimpleNamespace(returncode=1, stdout="", stderr="Error: no db")
    )
    with pytest.raises(CliError, match="no db"):
        BdCliWriter().create("x")


def test_unparseable_output(monkeypatch):
    monkeypatch.setattr(
        bd_cli.subprocess, "run", lambda cmd, **kwargs: SimpleNamespace(returncode=0, stdout="created!", stderr="")
    )
    with pytest.raises(SourceError) as exc:
        BdCliWriter().create("x")
    assert exc.value.code is ErrorCode.PARSE_FAILED


def _recording_run(calls, fail_on=None):
    def fake_run(cmd, capture_output, text, timeout):
        calls.append(cmd)
        if fail_on and fail_on in cmd:
            return SimpleNamespace(returncode=1, stdout="", stderr=f"Error: {fail_on} refused")
        if "create" in cmd:
            body = json.dumps({"id": "bd-7", "title": "New", "status": "open", "priority": 2})
            return SimpleNamespace(returncode=0, stdout=body, stderr="")
        return SimpleNamespace(returncode=0, stdout="", stderr="")

    return fake_run


def test_link_failure_keeps_the_created_issue(monkeypatch):
    calls = []
    monkeypatch.setattr(bd_cli.subprocess, "run", _recording_run(calls, fail_on="dep"))
    with pytest.raises(IssueLinkError) as exc:
        BdCliWriter().create("New", parent_id="bd-1")
    assert exc.value.issue.id == "bd-7"
    assert exc.value.parent_id == "bd-1"
    assert "dep refused" in exc.value.message
    assert isinstance(exc.value, CliError)


def test_mutation_commands(monkeypatch):
    calls = []
    monkeypatch.setattr(bd_cli.subprocess, "run", _recording_run(calls))
    writer = BdCliWriter()
    writer.update_status("bd-1", "In Progress")
    writer.reopen("bd-2")
    writer.delete("bd-3")
    writer.delete("bd-4", cascade=True)
    writer.add_comment("bd-5", "  looks good ")
    writer.add_label("bd-6", "ui")
    writer.remove_label("bd-6", "old")
    assert calls == [
        ["bd", "update", "bd-1", "--status=in_progress"],
        ["bd", "reopen", "bd-2"],
        ["bd", "delete", "bd-3", "--force"],
        ["bd", "delete", "bd-4", "--force", "--cascade"],
        ["bd", "comments", "add", "bd-5", "looks good"],
        ["bd", "label", "add", "bd-6", "ui"],
        ["bd", "label", "remove", "bd-6", "old"],
    ]


def test_mutation_arguments_are_validated():
    writer = BdCliWriter()
    with pytest.raises(ValueError):
        writer.update_status("bd-1", "tombstone")
    with pytest.raises(ValueError):
        writer.delete(" ")
    with pytest.raises(ValueError):
        writer.add_comment("bd-1", "   ")
    with pytest.raises(ValueError):
        writer.add_label("bd-1", "")
