from fastapi.testclient import TestClient

from directus_graph.app.main import app
from directus_graph.tests.fixtures import EXAMPLE_SNAPSHOT


class TestApi:
    def test_health(self):
        client = TestClient(app)
        assert client.get("/health").json() == {"status": "ok"}

    def test_sync_from_snapshot(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OUT_DIR", str(tmp_path / "out"))
        monkeypatch.setenv("GRAPH_SINK", "json")
        monkeypatch.setenv("RUN_STORE", "json")

        client = TestClient(app)
        response = client.post("/sync", json={"snapshot_path": str(EXAMPLE_SNAPSHOT), "download_files": False})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "warning"
        assert body["trigger"] == "api"
        assert body["metrics"]["nodes"] == 14
        assert (tmp_path / "out" / "graph_snapshot.json").exists()

    def test_sync_with_missing_snapshot_fails(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OUT_DIR", str(tmp_path / "out"))
        monkeypatch.setenv("GRAPH_SINK", "json")
        monkeypatch.setenv("RUN_STORE", "json")

        client = TestClient(app)
        response = client.post("/sync", json={"snapshot_path": str(tmp_path / "nope.json"), "download_files": False})

        assert response.status_code == 500
        assert "not found" in response.json()["detail"]
