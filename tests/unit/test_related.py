import pytest

from shop_by_specs.catalog.models import ExistingCollection, MatchRule
from shop_by_specs.catalog.related import (
    PARTS_COLLECTIONS,
    filter_entries_without_image,
    resolve_related_collections,
)
from shop_by_specs.errors import NotFoundError


DEFINITION_MAP = {"condition": "111", "size": "222", "fuel_type": "333"}


def collection(handle, *rules, image="https://cdn.example/x.jpg"):
    return ExistingCollection(id=handle, title=handle.replace("-", " ").title(), handle=handle, rules=list(rules), image=image)


def ptype(value):
    return MatchRule(column="type", condition=value)


def vendor(value):
    return MatchRule(column="vendor", condition=value)


def metafield(value, definition_id):
    return MatchRule(column="product_metafield_definition", condition=value, condition_object_id=definition_id)


@pytest.fixture
def collections():
    return [
        collection("boom-lift", ptype("Boom Lift")),
        collection("genie-boom-lift", vendor("Genie"), ptype("Boom Lift")),
        collection("used-boom-lift", metafield("Used", "111"), ptype("Boom Lift")),
        collection("used-genie-boom-lift", metafield("Used", "111"), vendor("Genie"), ptype("Boom Lift"), image=None),
        collection("electric-boom-lift", metafield("Electric", "333"), ptype("Boom Lift")),
        collection("30-46-boom-lift", metafield("30'-46'", "222"), ptype("Boom Lift")),
        collection("genie-scissor-lift", vendor("Genie"), ptype("Scissor Lift")),
    ]


def handles(refs):
    return [r.handle for r in refs]


def test_buckets_for_product_type_collection(collections):
    related = resolve_related_collections("boom-lift", collections, DEFINITION_MAP)

    assert handles(related.by_category) == [
        "genie-boom-lift",
        "used-boom-lift",
        "used-genie-boom-lift",
        "electric-boom-lift",
        "30-46-boom-lift",
    ]
    assert handles(related.by_manufacturer) == ["genie-boom-lift", "used-genie-boom-lift"]
    assert handles(related.by_size_item) == ["30-46-boom-lift"]
    assert handles(related.by_specs.condition) == ["used-boom-lift", "used-genie-boom-lift"]
    assert handles(related.by_specs.fuel_type) == ["electric-boom-lift"]
    assert related.parts == PARTS_COLLECTIONS


def test_target_with_vendor_gets_no_manufacturer_drilldown(collections):
    related = resolve_related_collections("genie-boom-lift", collections, DEFINITION_MAP)

    assert related.by_manufacturer == []
    assert "boom-lift" in handles(related.by_category)
    assert "genie-boom-lift" not in handles(related.by_category)


def test_target_without_product_type_gets_no_drilldown():
    collections = [
        collection("genie", vendor("Genie")),
        collection("jlg", vendor("JLG")),
        collection("genie-boom-lift", vendor("Genie"), ptype("Boom Lift")),
    ]

    related = resolve_related_collections("genie", collections, DEFINITION_MAP)

    assert handles(related.by_category) == ["jlg"]
    assert related.by_manufacturer == []
    assert related.by_specs.condition == []


def test_unknown_handle_raises(collections):
    with pytest.raises(NotFoundError):
        resolve_related_collections("does-not-exist", collections, DEFINITION_MAP)


def test_filter_drops_imageless_entries_but_keeps_parts(collections):
    related = filter_entries_without_image(resolve_related_collections("boom-lift", collections, DEFINITION_MAP))

    assert "used-genie-boom-lift" not in handles(related.by_category)
    assert handles(related.by_manufacturer) == ["genie-boom-lift"]
    assert handles(related.by_specs.condition) == ["used-boom-lift"]
    assert related.parts == PARTS_COLLECTIONS


def test_serialized_keys(collections):
    body = resolve_related_collections("boom-lift", collections, DEFINITION_MAP).model_dump(by_alias=True)

    assert set(body) == {"byCategory", "byManufacturer", "bySizeItem", "bySpecs", "parts"}
    assert set(body["bySpecs"]) == {"condition", "fuelType"}
    assert body["parts"][0] == {"title": "Genie Parts", "handle": "genie-parts", "image": None}
