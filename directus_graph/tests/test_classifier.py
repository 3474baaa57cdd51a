from directus_graph.app.models.relations import DirectRelation, RelationDeclaration
from directus_graph.app.services.relations.classifier import classify
from directus_graph.tests.fixtures import MOVIES_DIRECTORS, genre_legs


def _decls(*rows):
    return [RelationDeclaration.model_validate(r) for r in rows]


class TestClassify:
    def test_direct_and_junction_are_separated(self, reporter):
        result = classify(_decls(MOVIES_DIRECTORS, *genre_legs()), reporter)
        assert result.direct == [
            DirectRelation(
                collection_many="movies",
                field_many="directors",
                collection_one="directors",
                field_one="movies",
            )
        ]
        assert list(result.junction_groups) == ["movies_genres"]
        assert len(result.junction_groups["movies_genres"]) == 2
        assert not reporter.issues

    def test_legs_keep_declaration_order(self, reporter):
        legs = genre_legs()
        result = classify(_decls(legs[1], MOVIES_DIRECTORS, legs[0]), reporter)
        grouped = result.junction_groups["movies_genres"]
        assert [leg.collection_one for leg in grouped] == ["genres", "movies"]

    def test_missing_collection_many_drops_direct_relation(self, reporter):
        rel = dict(MOVIES_DIRECTORS, collection_many=None)
        result = classify(_decls(rel), reporter)
        assert result.direct == []
        assert result.junction_groups == {}
        assert len(reporter.warnings) == 1

    def test_blank_strings_count_as_missing(self, reporter):
        rel = dict(MOVIES_DIRECTORS, collection_one="  ")
        result = classify(_decls(rel), reporter)
        assert result.direct == []
        assert len(reporter.warnings) == 1

    def test_missing_field_one_defaults_to_collection_many(self, reporter):
        rel = dict(MOVIES_DIRECTORS, field_one=None)
        result = classify(_decls(rel), reporter)
        assert result.direct[0].field_one == "movies"
        assert len(reporter.warnings) == 1

    def test_missing_field_many_defaults_to_collection_one(self, reporter):
        rel = dict(MOVIES_DIRECTORS, field_many=None)
        result = classify(_decls(rel), reporter)
        assert result.direct[0].field_many == "directors"
        assert len(reporter.warnings) == 1
        assert reporter.warnings[0].step == "classify_relations"

    def test_junction_leg_without_collection_many_is_skipped(self, reporter):
        leg = dict(genre_legs()[0], collection_many=None)
        result = classify(_decls(leg), reporter)
        assert result.junction_groups == {}
        assert len(reporter.warnings) == 1

    def test_incomplete_junction_leg_is_grouped_untouched(self, reporter):
        leg = dict(genre_legs()[0], field_one=None)
        result = classify(_decls(leg), reporter)
        assert result.junction_groups["movies_genres"][0].field_one is None
        assert not reporter.issues

    def test_file_relation_keeps_empty_field_one(self, reporter):
        rel = {
            "collection_many": "movies",
            "field_many": "poster",
            "collection_one": "directus_files",
            "field_one": None,
            "junction_field": None,
        }
        result = classify(_decls(rel), reporter, file_collection="directus_files")
        assert result.direct[0].field_one is None
        assert not reporter.issues
