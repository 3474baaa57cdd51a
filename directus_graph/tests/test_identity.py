import pytest

from directus_graph.app.core.errors import SnapshotShapeError
from directus_graph.app.services.identity import (
    IdentityAssigner,
    assign_identities,
    generate_node_id,
)
from directus_graph.tests.fixtures import DIRECTORS, MOVIES, by_origin


class TestAssignIdentities:
    def test_node_ids_are_deterministic(self, reporter):
        first = assign_identities({"movies": MOVIES}, reporter)
        second = assign_identities({"movies": MOVIES}, reporter)
        assert [n.node_id for n in first["movies"]] == [n.node_id for n in second["movies"]]
        assert by_origin(first["movies"], 4).node_id == generate_node_id("Directus", "Movie", 4)

    def test_type_name_and_fields(self, reporter):
        nodes = assign_identities({"movies": MOVIES}, reporter)
        walle = by_origin(nodes["movies"], 4)
        assert walle.node_type == "DirectusMovie"
        assert walle.collection == "movies"
        assert walle.fields == {"name": "Wall-E", "directors": 0}
        assert walle.references == {}

    def test_ids_differ_across_types(self, reporter):
        nodes = assign_identities({"movies": MOVIES, "directors": DIRECTORS}, reporter)
        movie_ids = {n.node_id for n in nodes["movies"]}
        director_ids = {n.node_id for n in nodes["directors"]}
        assert not movie_ids & director_ids
        assert not reporter.issues

    def test_exception_table_changes_type(self, reporter):
        nodes = assign_identities({"directors": DIRECTORS}, reporter, exceptions={"directors": "Auteur"})
        assert nodes["directors"][0].node_type == "DirectusAuteur"

    def test_record_without_id_uses_first_field(self, reporter):
        rows = [
            {"language": "en", "title": "Hello"},
            {"language": "fr", "title": "Bonjour"},
        ]
        nodes = assign_identities({"translations": rows}, reporter)["translations"]
        assert nodes[0].node_id == generate_node_id("Directus", "Translation", "en")
        assert nodes[1].node_id == generate_node_id("Directus", "Translation", "fr")
        assert nodes[0].origin_id is None

    def test_record_without_any_key_uses_position(self, reporter):
        rows = [{"id": ""}, {"id": None}]
        nodes = assign_identities({"blanks": rows}, reporter)["blanks"]
        assert nodes[0].node_id == generate_node_id("Directus", "Blank", "#0")
        assert nodes[1].node_id == generate_node_id("Directus", "Blank", "#1")
        assert not reporter.issues

    def test_duplicate_ids_are_disambiguated(self, reporter):
        rows = [{"id": 1, "name": "a"}, {"id": 1, "name": "b"}]
        nodes = assign_identities({"movies": rows}, reporter)["movies"]
        assert nodes[0].node_id != nodes[1].node_id
        assert len(reporter.warnings) == 1
        assert reporter.warnings[0].step == "assign_identities"

    def test_collections_sharing_a_type_name_do_not_collide(self, reporter):
        assigner = IdentityAssigner(reporter)
        nodes = assigner.assign({"movies": [{"id": 1}], "movie": [{"id": 1}]})
        assert nodes["movies"][0].node_id != nodes["movie"][0].node_id
        assert len(reporter.warnings) == 1

    def test_file_nodes_use_file_type(self, reporter):
        assigner = IdentityAssigner(reporter)
        files = assigner.assign_files([{"id": 3, "filename_download": "a.jpg"}])
        assert files[0].node_type == "DirectusFile"
        assert files[0].collection == "directus_files"
        assert files[0].node_id == generate_node_id("Directus", "File", 3)

    def test_non_mapping_item_is_a_shape_error(self, reporter):
        with pytest.raises(SnapshotShapeError):
            assign_identities({"movies": [["not", "a", "record"]]}, reporter)
