import json

import httpx
import pytest

import jc_cli
from jcapi import JCAPIClient


@pytest.fixture
def fake_api(monkeypatch, recorder, tmp_path):
    monkeypatch.chdir(tmp_path)

    def make_client(api_key, url):
        return JCAPIClient(api_key, url, transport=httpx.MockTransport(recorder))

    monkeypatch.setattr(jc_cli, "JCAPIClient", make_client)
    return recorder


def test_no_command_prints_help(capsys):
    assert jc_cli.main([]) == 0
    assert "usage: jc-cli" in capsys.readouterr().out


def test_user_list_with_tags(fake_api, capsys):
    fake_api.add("GET", "/api/systemusers", {"totalCount": 1, "results": [
        {"_id": "U1", "username": "alice", "email": "a@b.com", "activated": True},
    ]})
    fake_api.add("GET", "/api/tags", {"totalCount": 1, "results": [
        {"_id": "T1", "name": "admins", "systemusers": ["U1"]},
    ]})

    assert jc_cli.main(["--key", "k", "user", "list", "--tags"]) == 0

    out = capsys.readouterr().out
    assert "✓ alice <a@b.com> [id: U1] tags: admins" in out


def test_user_get_json(fake_api, capsys):
    fake_api.add("POST", "/api/search/systemusers", {"totalCount": 1, "results": [
        {"_id": "U1", "username": "alice", "email": "a@b.com"},
    ]})
    fake_api.add("GET", "/api/tags", {"totalCount": 0, "results": []})

    assert jc_cli.main(["--key", "k", "user", "get", "a@b.com"]) == 0

    users = json.loads(capsys.readouterr().out)
    assert users[0]["id"] == "U1"
    assert "password" not in users[0]


def test_command_results(fake_api, capsys):
    fake_api.add("GET", "/api/commands/C1/results", [
        {"system": "S1", "requestTime": "t", "response": {"data": {"output": "root\n\nalice", "exitCode": 0}}},
    ])

    assert jc_cli.main(["--key", "k", "command", "results", "C1"]) == 0

    out = capsys.readouterr().out
    assert "S1 @ t exit: 0" in out
    assert "      alice" in out


def test_missing_key(fake_api, capsys):
    assert jc_cli.main(["system", "list"]) == 1
    assert "API key must be provided" in capsys.readouterr().out


def test_api_error(fake_api, capsys):
    assert jc_cli.main(["--key", "k", "tag", "list"]) == 1
    assert "✗ JumpCloud HTTP response status='404 Not Found'" in capsys.readouterr().out
