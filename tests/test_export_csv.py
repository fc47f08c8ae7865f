import io
import logging

import httpx
import pytest

import export_command_results_csv as export
from jcapi import JCAPIClient, JCCommandResult

HEADER = "SYSTEM ID,USERNAME,JUMPCLOUD USERNAME,COMMAND REQUEST TIME\n"

RESULTS = [
    {
        "_id": "R1",
        "system": "S1",
        "requestTime": "2024-01-01T00:00:00Z",
        "response": {"data": {"output": "line1\n\nline2  \n", "exitCode": 0}},
    },
    {
        "_id": "R2",
        "system": "S2",
        "requestTime": "2024-01-02T00:00:00Z",
        "response": {"data": {"output": "root", "exitCode": 0}},
    },
]


class FlushCounter(io.StringIO):
    def __init__(self):
        super().__init__()
        self.flushes = 0

    def flush(self):
        self.flushes += 1
        super().flush()


@pytest.fixture
def fake_api(monkeypatch, recorder, tmp_path):
    """export 使用的客户端改走 MockTransport，并隔离 jc-config.json"""
    monkeypatch.chdir(tmp_path)
    recorder.add("GET", "/api/commands/C1/results", RESULTS)

    def make_client(api_key, url):
        return JCAPIClient(api_key, url, transport=httpx.MockTransport(recorder))

    monkeypatch.setattr(export, "JCAPIClient", make_client)
    return recorder


def test_write_results_to_csv_splits_output():
    results = [JCCommandResult(system="S1", request_time="2024-01-01T00:00:00Z", output="line1\n\nline2  \n")]
    stream = io.StringIO()

    rows = export.write_results_to_csv(results, stream)

    assert rows == 2
    assert stream.getvalue() == (
        HEADER
        + "S1,line1,,2024-01-01T00:00:00Z\n"
        + "S1,line2,,2024-01-01T00:00:00Z\n"
    )


def test_write_results_to_csv_empty():
    stream = io.StringIO()
    assert export.write_results_to_csv([], stream) == 0
    assert stream.getvalue() == HEADER


def test_write_results_to_csv_flushes_after_header_and_each_result():
    results = [JCCommandResult(system="S1", output="a"), JCCommandResult(system="S2", output="")]
    stream = FlushCounter()

    export.write_results_to_csv(results, stream)

    assert stream.flushes == 3


def test_write_results_to_csv_quotes_commas():
    stream = io.StringIO()
    export.write_results_to_csv([JCCommandResult(system="S1", request_time="t", output="a,b")], stream)
    assert stream.getvalue().splitlines()[1] == 'S1,"a,b",,t'


def test_resolve_output_path_is_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = export.resolve_output_path("out.csv")
    assert path.is_absolute()
    assert path == tmp_path / "out.csv"


def test_resolve_output_path_refuses_existing(tmp_path):
    existing = tmp_path / "out.csv"
    existing.write_text("keep me")

    with pytest.raises(FileExistsError, match="already exists"):
        export.resolve_output_path(str(existing))


def test_main_writes_file(fake_api, tmp_path):
    out = tmp_path / "results.csv"

    assert export.main(["-key", "k", "-commandid", "C1", "-out", str(out)]) == 0

    assert out.read_text() == (
        HEADER
        + "S1,line1,,2024-01-01T00:00:00Z\n"
        + "S1,line2,,2024-01-01T00:00:00Z\n"
        + "S2,root,,2024-01-02T00:00:00Z\n"
    )
    req = fake_api.requests[0]
    assert req.headers["x-api-key"] == "k"
    assert str(req.url) == "https://console.jumpcloud.com/api/commands/C1/results"


def test_main_writes_stdout(fake_api, capsys):
    assert export.main(["-key", "k", "-commandid", "C1", "-url", "https://alt.example.com/api"]) == 0

    out = capsys.readouterr().out
    assert out.startswith(HEADER)
    assert "S2,root,,2024-01-02T00:00:00Z" in out
    assert str(fake_api.requests[0].url).startswith("https://alt.example.com/api/")


def test_main_refuses_existing_output(fake_api, tmp_path, caplog):
    out = tmp_path / "results.csv"
    out.write_text("keep me")

    with caplog.at_level(logging.CRITICAL):
        assert export.main(["-key", "k", "-commandid", "C1", "-out", str(out)]) == 1

    assert "already exists" in caplog.text
    assert out.read_text() == "keep me"
    assert fake_api.requests == []


@pytest.mark.parametrize("argv, message", [
    (["-commandid", "C1"], "API key must be provided"),
    (["-key", "k"], "Command id must be provided"),
])
def test_main_requires_flags(fake_api, caplog, argv, message):
    with caplog.at_level(logging.CRITICAL):
        assert export.main(argv) == 1
    assert message in caplog.text
    assert fake_api.requests == []


def test_main_reads_key_from_config(fake_api, tmp_path):
    (tmp_path / "jc-config.json").write_text('{"api_key": "from-config"}')

    assert export.main(["-commandid", "C1", "-out", str(tmp_path / "o.csv")]) == 0
    assert fake_api.requests[0].headers["x-api-key"] == "from-config"


def test_main_api_error_is_fatal(fake_api, tmp_path, caplog):
    out = tmp_path / "results.csv"

    with caplog.at_level(logging.CRITICAL):
        assert export.main(["-key", "k", "-commandid", "missing", "-out", str(out)]) == 1

    assert "404 Not Found" in caplog.text
    assert not out.exists()
