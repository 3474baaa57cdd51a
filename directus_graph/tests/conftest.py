import pytest

from directus_graph.app.core.settings import Settings
from directus_graph.app.models.records import Snapshot
from directus_graph.app.services.reporter import Reporter
from directus_graph.tests.fixtures import load_example_payload


@pytest.fixture
def reporter():
    return Reporter(run_id="test-run")


@pytest.fixture
def snapshot_payload():
    return load_example_payload()


@pytest.fixture
def movie_snapshot(snapshot_payload):
    return Snapshot.from_payload(snapshot_payload)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        out_dir=tmp_path / "out",
        files_dir=tmp_path / "files",
        download_files=False,
        run_id="test-run",
    )
