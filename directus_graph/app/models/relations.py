from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

# -------------------------------------------------------------------------
# Relations (Directus "relations" endpoint)
# -------------------------------------------------------------------------

JUNCTION_LEG_FIELDS: Tuple[str, ...] = ("collection_one", "field_one", "field_many", "junction_field")

# Directus keeps its own tables (users, activity, ...) under this prefix
SYSTEM_PREFIX = "directus_"


class RelationDeclaration(BaseModel):
    """
    One row of the Directus relations table. Any slot may be missing;
    junction_field is None for a direct (many-to-one / one-to-many) relation.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    collection_many: Optional[str] = None
    field_many: Optional[str] = None
    collection_one: Optional[str] = None
    field_one: Optional[str] = None
    junction_field: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_direct(self) -> bool:
        return self.junction_field is None

    def is_system(self, file_collection: str = "directus_files") -> bool:
        """True when either end is a Directus system collection other than the file collection."""
        for name in (self.collection_many, self.collection_one):
            if name and name != file_collection and name.startswith(SYSTEM_PREFIX):
                return True
        return False

    def missing(self, names: Tuple[str, ...] = JUNCTION_LEG_FIELDS) -> List[str]:
        return [n for n in names if getattr(self, n) is None]

    def describe(self) -> Dict[str, Optional[str]]:
        return self.model_dump()


class DirectRelation(BaseModel):
    model_config = ConfigDict(frozen=True)

    collection_many: str
    field_many: str
    collection_one: str
    field_one: Optional[str] = None


class ClassifiedRelations(BaseModel):
    direct: List[DirectRelation] = []
    # collection_many -> legs in declaration order
    junction_groups: Dict[str, List[RelationDeclaration]] = {}


# -------------------------------------------------------------------------
# Collection catalogue (Directus "collections" endpoint)
# -------------------------------------------------------------------------

class FieldMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    field: Optional[str] = None
    type: Optional[str] = None


class CollectionInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    collection: str
    fields: Dict[str, FieldMeta] = {}

    @field_validator("fields", mode="before")
    @classmethod
    def _fields_by_name(cls, v: Any) -> Any:
        # Some API versions return the fields as a list of objects
        if isinstance(v, list):
            return {f["field"]: f for f in v if isinstance(f, dict) and f.get("field")}
        return v or {}

    def fields_of_type(self, type_name: str) -> List[str]:
        return [name for name, meta in self.fields.items() if (meta.type or "").lower() == type_name]
