import pytest

from directus_graph.app.models.records import Snapshot
from directus_graph.app.services.identity import generate_node_id
from directus_graph.app.services.reporter import Reporter
from directus_graph.app.services.resolver import resolve_snapshot
from directus_graph.tests.fixtures import by_name, by_origin


class TestResolveSnapshot:
    def test_example_snapshot(self, movie_snapshot, settings, reporter):
        graph = resolve_snapshot(movie_snapshot, settings, reporter)

        assert set(graph.nodes_by_collection) == {"movies", "directors", "genres"}
        assert graph.node_count() == 14

        movies = graph.nodes_by_collection["movies"]
        directors = graph.nodes_by_collection["directors"]
        genres = graph.nodes_by_collection["genres"]
        files = graph.files

        titanic = by_name(movies, "Titanic")
        walle = by_name(movies, "Wall-E")
        romeo = by_name(movies, "Romeo & Juliet")

        # direct
        assert by_origin(directors, 1).references["movies"] == [romeo.node_id, by_name(movies, "Bambi").node_id]
        assert walle.references["directors"] == by_origin(directors, 0).node_id

        # junctions
        assert walle.references["genres"] == [by_name(genres, "Sci-fi").node_id, by_name(genres, "Comedy").node_id]
        assert by_name(genres, "Thriller").references == {}
        assert titanic.references["stills"] == [by_origin(files, 3).node_id, by_origin(files, 1).node_id]

        # file fields
        assert titanic.references["poster"] == by_origin(files, 1).node_id
        assert "poster" not in titanic.fields
        assert walle.fields["poster"] == 99

        assert len(reporter.warnings) == 5
        assert not reporter.errors

    def test_serialized_nodes(self, movie_snapshot, settings, reporter):
        graph = resolve_snapshot(movie_snapshot, settings, reporter)
        walle = by_name(graph.nodes_by_collection["movies"], "Wall-E").to_dict()

        assert walle["id"] == generate_node_id("Directus", "Movie", 4)
        assert walle["directus_id"] == 4
        assert walle["name"] == "Wall-E"
        assert walle["directors___ref"] == generate_node_id("Directus", "Director", 0)
        assert "directors" not in walle
        assert walle["internal"] == {"type": "DirectusMovie", "collection": "movies"}

    def test_reference_suffix_is_configurable(self, movie_snapshot, settings, reporter):
        graph = resolve_snapshot(movie_snapshot, settings, reporter)
        titanic = by_name(graph.nodes_by_collection["movies"], "Titanic").to_dict("___NODE")
        assert "poster___NODE" in titanic
        assert "stills___NODE" in titanic

    def test_runs_are_deterministic(self, snapshot_payload, settings):
        first = resolve_snapshot(Snapshot.from_payload(snapshot_payload), settings, Reporter())
        second = resolve_snapshot(Snapshot.from_payload(snapshot_payload), settings, Reporter())
        assert first.to_dict() == second.to_dict()

    def test_resolved_nodes_are_immutable(self, movie_snapshot, settings, reporter):
        graph = resolve_snapshot(movie_snapshot, settings, reporter)
        node = graph.nodes_by_collection["movies"][0]
        with pytest.raises(TypeError):
            node.fields["name"] = "changed"

    def test_snapshot_without_relations(self, settings, reporter):
        snapshot = Snapshot.from_payload({"items": {"movies": [{"id": 1, "name": "Up"}]}})
        graph = resolve_snapshot(snapshot, settings, reporter)
        assert graph.node_count() == 1
        assert graph.files == []
        assert not reporter.issues

    def test_file_field_declared_as_relation(self, settings, reporter):
        snapshot = Snapshot.from_payload({
            "collections": [{"collection": "movies", "fields": {"poster": {"field": "poster", "type": "file"}}}],
            "items": {"movies": [{"id": 1, "name": "Up", "poster": 7}, {"id": 2, "name": "Cars", "poster": 8}]},
            "relations": [{
                "collection_many": "movies",
                "field_many": "poster",
                "collection_one": "directus_files",
                "field_one": None,
                "junction_field": None,
            }],
            "files": [{"id": 7, "filename_download": "up.jpg"}],
        })
        graph = resolve_snapshot(snapshot, settings, reporter)

        movies = graph.nodes_by_collection["movies"]
        assert by_name(movies, "Up").references["poster"] == graph.files[0].node_id
        # reported once, by the relation linker only
        assert len(reporter.warnings) == 1
        assert reporter.warnings[0].step == "link_direct"
        assert by_name(movies, "Cars").fields["poster"] == 8

    def test_system_relations_are_ignored(self, settings, reporter):
        snapshot = Snapshot.from_payload({
            "items": {"movies": [{"id": 1, "name": "Up"}]},
            "relations": [
                {"collection_many": "directus_users", "field_many": "avatar", "collection_one": "directus_files"},
                {"collection_many": "directus_activity", "field_many": "action_by", "collection_one": "directus_users"},
            ],
        })
        graph = resolve_snapshot(snapshot, settings, reporter)
        assert graph.node_count() == 1
        assert not reporter.issues
