from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from directus_graph.app.models.relations import ClassifiedRelations, DirectRelation, RelationDeclaration
from directus_graph.app.services.reporter import Reporter

STEP = "classify_relations"


def classify(
    declarations: Iterable[RelationDeclaration],
    reporter: Reporter,
    file_collection: Optional[str] = None,
) -> ClassifiedRelations:
    """
    Single validation pass over the declared relations. Direct relations come
    out complete (missing field names get a best-guess default); junction legs
    are grouped by their junction collection and left untouched.
    Relations to `file_collection` may leave field_one empty: file nodes get
    no back references then.
    """
    direct: List[DirectRelation] = []
    groups: Dict[str, List[RelationDeclaration]] = {}

    for index, rel in enumerate(declarations):
        if rel.is_direct:
            d = _direct(index, rel, reporter, file_collection)
            if d is not None:
                direct.append(d)
            continue

        if rel.collection_many is None:
            reporter.warning(
                STEP,
                f"Many-To-Many relation #{index} has no junction collection, skipping it",
                relation=rel.describe(),
            )
            continue
        groups.setdefault(rel.collection_many, []).append(rel)

    return ClassifiedRelations(direct=direct, junction_groups=groups)


def _direct(
    index: int, rel: RelationDeclaration, reporter: Reporter, file_collection: Optional[str]
) -> Optional[DirectRelation]:
    cm = rel.collection_many
    co = rel.collection_one
    if cm is None or co is None:
        reporter.warning(
            STEP,
            f"Relation #{index} is missing {'collection_many' if cm is None else 'collection_one'}, skipping it",
            relation=rel.describe(),
        )
        return None

    fo = rel.field_one
    if fo is None and co != file_collection:
        fo = cm
        reporter.warning(
            STEP,
            f"Relation {co} -> {cm} has no field_one, using '{fo}'",
            relation=rel.describe(),
        )

    fm = rel.field_many
    if fm is None:
        fm = co
        reporter.warning(
            STEP,
            f"Relation {co} -> {cm} has no field_many, using '{fm}'",
            relation=rel.describe(),
        )

    return DirectRelation(collection_many=cm, field_many=fm, collection_one=co, field_one=fo)
