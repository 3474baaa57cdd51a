from directus_graph.app.services.naming import node_type, type_name_for_collection


class TestTypeNameForCollection:
    def test_plural_collection_is_singularized_and_capitalized(self):
        assert type_name_for_collection("movies") == "Movie"
        assert type_name_for_collection("directors") == "Director"
        assert type_name_for_collection("categories") == "Category"

    def test_irregular_plural(self):
        assert type_name_for_collection("people") == "Person"

    def test_singular_name_is_kept(self):
        assert type_name_for_collection("movie") == "Movie"

    def test_exception_table_wins(self):
        exceptions = {"people": "Human"}
        assert type_name_for_collection("people", exceptions) == "Human"
        assert type_name_for_collection("movies", exceptions) == "Movie"

    def test_node_type_adds_prefix(self):
        assert node_type("Directus", "Movie") == "DirectusMovie"
