from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Attribute slots, in the bit order used when enumerating combinations
CONDITION = "condition"
VENDOR = "vendor"
PRODUCT_TYPE = "product_type"
SIZE = "size"
FUEL_TYPE = "fuel_type"

OPTIONAL_ATTRIBUTES = [CONDITION, VENDOR, SIZE, FUEL_TYPE]
METAFIELD_ATTRIBUTES = [CONDITION, SIZE, FUEL_TYPE]

# Order used for titles and handles
CANONICAL_ORDER = [CONDITION, SIZE, VENDOR, FUEL_TYPE, PRODUCT_TYPE]

# Rule columns as the store's REST API spells them
COLUMN_VENDOR = "vendor"
COLUMN_TYPE = "type"
COLUMN_METAFIELD = "product_metafield_definition"
RELATION_EQUALS = "equals"


class ProductAttributeSet(BaseModel):
    condition: str = ""
    vendor: str = ""
    product_type: str = ""
    size: str = ""
    fuel_type: str = ""

    def get(self, name: str) -> str:
        return getattr(self, name, "") or ""


class MatchRule(BaseModel):
    column: str
    relation: str = RELATION_EQUALS
    condition: str
    condition_object_id: Optional[str] = None
    # Key of the referenced metafield definition, when the store sent it
    definition_key: Optional[str] = Field(default=None, exclude=True)


class CollectionDefinition(BaseModel):
    title: str
    handle: str
    rules: List[MatchRule] = []

    def to_rest_payload(self, disjunctive: bool = False, published: bool = True) -> dict:
        return {
            "smart_collection": {
                "title": self.title,
                "handle": self.handle,
                "rules": [r.model_dump(exclude_none=True) for r in self.rules],
                "disjunctive": disjunctive,
                "published": published,
            }
        }


class ExistingCollection(BaseModel):
    id: str
    title: str = ""
    handle: str = ""
    rules: List[MatchRule] = []
    image: Optional[str] = None
    created_at: Optional[str] = None


class MetafieldDefinition(BaseModel):
    id: str
    key: str
    name: str = ""
    namespace: Optional[str] = None


class CollectionRef(BaseModel):
    title: str
    handle: str
    image: Optional[str] = None


class SpecsBuckets(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    condition: List[CollectionRef] = []
    fuel_type: List[CollectionRef] = Field(default_factory=list, alias="fuelType")


class RelatedCollectionsResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    by_category: List[CollectionRef] = Field(default_factory=list, alias="byCategory")
    by_manufacturer: List[CollectionRef] = Field(default_factory=list, alias="byManufacturer")
    by_size_item: List[CollectionRef] = Field(default_factory=list, alias="bySizeItem")
    by_specs: SpecsBuckets = Field(default_factory=SpecsBuckets, alias="bySpecs")
    parts: List[CollectionRef] = []
