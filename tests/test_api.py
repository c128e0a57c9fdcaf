"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from lmreport.api import create_app
from lmreport.config import Settings


@pytest.fixture
def make_client():
    def _make(directory, **overrides):
        settings = Settings(INCOMING_DIR=directory, LOG_LEVEL="WARNING", **overrides)
        return TestClient(create_app(settings))
    return _make


@pytest.fixture
def client(make_client, incoming_dir):
    return make_client(incoming_dir)


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["status"] == "ok"


def test_tools(client):
    resp = client.get("/api/tools")
    assert resp.json()["data"] == ["cadence", "synopsys"]


def test_licenses_all_and_filtered(client):
    all_records = client.get("/api/licenses").json()["data"]
    assert len(all_records) == 5

    synopsys = client.get("/api/licenses", params={"tool": "synopsys"}).json()["data"]
    assert {r["tool"] for r in synopsys} == {"synopsys"}
    assert len(synopsys) == 4

    by_path = client.get("/api/licenses/cadence").json()["data"]
    assert [r["feature"] for r in by_path] == ["Virtuoso"]
    assert by_path[0]["totalLicenses"] == 3


def test_feature_detail(client):
    resp = client.get("/api/feature/cadence/Virtuoso")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["userUsageCount"] == {"dave": 2}
    assert [d["usageCount"] for d in data["userDetails"]] == [2, 2]


def test_feature_not_found(client):
    resp = client.get("/api/feature/cadence/Nope")
    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "Feature not found"


def test_upload_parses_and_stores(client, incoming_dir, sample_report):
    resp = client.post(
        "/api/upload",
        files={"file": ("mentor_4.txt", sample_report.encode("utf-8"), "text/plain")},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["tool"] == "mentor"
    assert data["fileName"] == "mentor_4.txt"
    assert [f["feature"] for f in data["features"]] == ["RTL_Compiler", "Genus_Synthesis", "Voltus"]
    assert (incoming_dir / "mentor_4.txt").read_text(encoding="utf-8") == sample_report
    assert not [p for p in incoming_dir.iterdir() if p.name.startswith(".upload-")]


def test_upload_with_explicit_tool(client, sample_report):
    resp = client.post(
        "/api/upload",
        files={"file": ("dump.txt", sample_report.encode("utf-8"), "text/plain")},
        data={"tool": "siemens"},
    )
    assert resp.json()["data"]["tool"] == "siemens"
    assert {f["tool"] for f in resp.json()["data"]["features"]} == {"siemens"}


def test_upload_duplicate_is_conflict(client, incoming_dir):
    before = (incoming_dir / "Cadence.txt").read_text(encoding="utf-8")
    resp = client.post("/api/upload", files={"file": ("Cadence.txt", b"other", "text/plain")})
    assert resp.status_code == 409
    assert resp.json()["success"] is False
    assert "already exists" in resp.json()["error"]
    assert (incoming_dir / "Cadence.txt").read_text(encoding="utf-8") == before


@pytest.mark.parametrize("name, content, content_type", [
    ("empty.txt", b"", "text/plain"),
    ("image.png", b"\x89PNG", "image/png"),
    ("nul.txt", b"abc\x00def", "text/plain"),
])
def test_upload_rejects_bad_files(client, incoming_dir, name, content, content_type):
    resp = client.post("/api/upload", files={"file": (name, content, content_type)})
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert not (incoming_dir / name).exists()


def test_upload_rejects_oversized(make_client, incoming_dir):
    client = make_client(incoming_dir, MAX_UPLOAD_BYTES=10)
    resp = client.post("/api/upload", files={"file": ("big.txt", b"x" * 11, "text/plain")})
    assert resp.status_code == 400
    assert not (incoming_dir / "big.txt").exists()


def test_upload_without_file(client):
    resp = client.post("/api/upload")
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert resp.json()["error"]


def test_files_for_tool(client):
    assert client.get("/api/files/synopsys").json()["data"] == ["synopsys_1.txt", "synopsys_2.txt"]


def test_files_for_tool_without_directory(make_client, tmp_path):
    client = make_client(tmp_path / "never-created")
    resp = client.get("/api/files/synopsys")
    assert resp.status_code == 404


def test_delete_tool(client, incoming_dir):
    resp = client.delete("/api/tool/synopsys")
    assert resp.status_code == 200
    assert resp.json()["data"]["files"] == ["synopsys_1.txt", "synopsys_2.txt"]
    assert sorted(p.name for p in incoming_dir.iterdir()) == ["Cadence.txt"]

    assert client.delete("/api/tool/synopsys").status_code == 404


def test_delete_file(client, incoming_dir):
    assert client.delete("/api/file/Cadence.txt").status_code == 200
    assert not (incoming_dir / "Cadence.txt").exists()

    resp = client.delete("/api/file/Cadence.txt")
    assert resp.status_code == 404
    assert resp.json()["error"] == "File not found: Cadence.txt"


def test_check_changes(client, incoming_dir):
    assert client.get("/api/check-changes").json()["data"]["hasChanges"] is False

    (incoming_dir / "ansys.txt").write_text("Users of X:", encoding="utf-8")
    data = client.get("/api/check-changes").json()["data"]
    assert data["hasChanges"] is True
    assert data["added"] == ["ansys.txt"]

    assert client.get("/api/check-changes").json()["data"]["hasChanges"] is False


def test_delete_refreshes_watcher(client):
    client.delete("/api/file/Cadence.txt")
    assert client.get("/api/check-changes").json()["data"]["hasChanges"] is False


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json()["success"] is False
