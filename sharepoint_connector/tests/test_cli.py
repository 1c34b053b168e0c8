import io
import json
from urllib.error import HTTPError

import pytest

from sharepoint_connector import cli
from sharepoint_connector.cli import main

RECYCLE_ID = "5f1c2a8e-7d3b-4c1a-9e2f-0a1b2c3d4e5f"


class FakeResponse:
    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self._body = body

    def read(self) -> bytes:
        return self._body

    def close(self) -> None:
        return None


@pytest.fixture
def env_file(monkeypatch, tmp_path):
    monkeypatch.setenv("sp_site_url", "https://contoso.sharepoint.com/sites/demo")
    monkeypatch.setenv("sp_server_relative_url", "/sites/demo/Shared Documents")
    monkeypatch.setenv("sp_access_token", "token-cli")
    return str(tmp_path / "missing.env")


@pytest.fixture
def requests(monkeypatch):
    sent = []
    responses = []

    def fake_urlopen(request, timeout=None):
        sent.append(request)
        return responses.pop(0)

    monkeypatch.setattr("sharepoint_connector.client.urlopen", fake_urlopen)
    return sent, responses


def test_cli_mkdir_outputs_folder_json(capsys, env_file, requests) -> None:
    sent, responses = requests
    responses.append(
        FakeResponse(
            201,
            json.dumps(
                {"Name": "Archive", "ServerRelativeUrl": "/sites/demo/Shared Documents/Reports/Archive"}
            ).encode("utf-8"),
        )
    )

    exit_code = main(["--env-file", env_file, "mkdir", "Archive", "--parent", "Reports"])
    captured = capsys.readouterr()

    assert exit_code == 0
    payload = json.loads(captured.out.strip())
    assert payload["name"] == "Archive"
    assert payload["server_relative_url"] == "/sites/demo/Shared Documents/Reports/Archive"
    assert json.loads(sent[0].data.decode("utf-8")) == {
        "ServerRelativeUrl": "/sites/demo/Shared Documents/Reports/Archive"
    }


def test_cli_upload_reads_local_file(capsys, env_file, requests, tmp_path) -> None:
    sent, responses = requests
    local_file = tmp_path / "notes.txt"
    local_file.write_bytes(b"hello")
    responses.append(
        FakeResponse(200, json.dumps({"Name": "notes.txt", "Length": "5"}).encode("utf-8"))
    )

    exit_code = main(["--env-file", env_file, "upload", "Reports", str(local_file)])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert json.loads(captured.out.strip())["length"] == 5
    assert sent[0].data == b"hello"
    assert sent[0].full_url.endswith("/Files/add(overwrite=true,url='notes.txt')")


def test_cli_recycle_and_restore(capsys, env_file, requests) -> None:
    sent, responses = requests
    responses.append(FakeResponse(200, json.dumps({"value": RECYCLE_ID}).encode("utf-8")))
    responses.append(FakeResponse(200, b""))

    assert main(["--env-file", env_file, "recycle", "Reports/2023"]) == 0
    recycled = json.loads(capsys.readouterr().out.strip())
    assert recycled == {"recycle_bin_id": RECYCLE_ID}

    assert main(["--env-file", env_file, "restore", RECYCLE_ID]) == 0
    restored = json.loads(capsys.readouterr().out.strip())
    assert restored == {"restored": True}
    assert sent[1].full_url.endswith(f"/_api/web/recyclebin('{RECYCLE_ID}')/restore")


def test_cli_delete_file(capsys, env_file, requests) -> None:
    sent, responses = requests
    responses.append(FakeResponse(200, b""))

    exit_code = main(["--env-file", env_file, "delete-file", "Reports", "old.txt"])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert json.loads(captured.out.strip()) == {"deleted": True}
    assert "GetFileByServerRelativeUrl" in sent[0].full_url


def test_cli_reports_request_errors(capsys, env_file, monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        body = json.dumps({"error": {"message": "Access denied."}}).encode("utf-8")
        raise HTTPError(request.full_url, 403, "Forbidden", {}, io.BytesIO(body))

    monkeypatch.setattr("sharepoint_connector.client.urlopen", fake_urlopen)

    exit_code = main(["--env-file", env_file, "delete", "Reports"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert captured.out == ""
    assert "sharepoint-connector:" in captured.err
    assert "Access denied." in captured.err


def test_cli_reports_missing_configuration(capsys, monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("sp_site_url", "https://contoso.sharepoint.com/sites/demo")
    monkeypatch.delenv("sp_server_relative_url", raising=False)

    exit_code = main(["--env-file", str(tmp_path / "missing.env"), "delete", "Reports"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "sp_server_relative_url" in captured.err


def test_cli_rejects_invalid_restore_id(capsys, env_file, requests) -> None:
    sent, _ = requests

    exit_code = main(["--env-file", env_file, "restore", "not-a-guid"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "not a valid GUID" in captured.err
    assert sent == []


def test_cli_requires_a_command(capsys) -> None:
    with pytest.raises(SystemExit):
        main([])
    assert "sharepoint-connector" in capsys.readouterr().err
    assert cli._build_parser().prog == "sharepoint-connector"
