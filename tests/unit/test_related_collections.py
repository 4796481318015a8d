import pytest
from fastapi.testclient import TestClient

from shop_by_specs.api.routes import collections as collections_route
from shop_by_specs.catalog.models import ExistingCollection, MatchRule, RelatedCollectionsResult
from shop_by_specs.errors import NotFoundError, TransientNetworkError
from shop_by_specs.main import app
from shop_by_specs.services import related_collections


BOOM_LIFT = ExistingCollection(
    id="gid://shopify/Collection/1",
    title="Boom Lift",
    handle="boom-lift",
    rules=[MatchRule(column="type", condition="Boom Lift")],
    image="https://cdn.example/boom.jpg",
)
GENIE_BOOM_LIFT = ExistingCollection(
    id="gid://shopify/Collection/2",
    title="Genie Boom Lift",
    handle="genie-boom-lift",
    rules=[MatchRule(column="vendor", condition="Genie"), MatchRule(column="type", condition="Boom Lift")],
)


def patch_store(monkeypatch, target, listing):
    async def by_handle(handle, shopify_client=None):
        return target

    async def definitions(shopify_client=None):
        return {}

    async def smart(shopify_client=None):
        return listing

    monkeypatch.setattr(related_collections, "get_collection_by_handle", by_handle)
    monkeypatch.setattr(related_collections, "get_definition_map", definitions)
    monkeypatch.setattr(related_collections, "list_smart_collections", smart)


@pytest.mark.asyncio
async def test_entries_without_image_are_filtered_by_default(monkeypatch):
    patch_store(monkeypatch, GENIE_BOOM_LIFT, [BOOM_LIFT, GENIE_BOOM_LIFT])

    filtered = await related_collections.get_related_collections("genie-boom-lift", shopify_client=object())
    legacy = await related_collections.get_related_collections(
        "genie-boom-lift", shopify_client=object(), include_without_image=True
    )

    assert [r.handle for r in filtered.by_category] == ["boom-lift"]
    assert [r.handle for r in legacy.by_category] == ["boom-lift"]


@pytest.mark.asyncio
async def test_imageless_entry_only_in_legacy_output(monkeypatch):
    patch_store(monkeypatch, BOOM_LIFT, [BOOM_LIFT, GENIE_BOOM_LIFT])

    filtered = await related_collections.get_related_collections("boom-lift", shopify_client=object())
    legacy = await related_collections.get_related_collections(
        "boom-lift", shopify_client=object(), include_without_image=True
    )

    assert filtered.by_manufacturer == []
    assert [r.handle for r in legacy.by_manufacturer] == ["genie-boom-lift"]
    assert len(filtered.parts) == 4


@pytest.mark.asyncio
async def test_target_missing_from_smart_listing_is_added(monkeypatch):
    custom = ExistingCollection(id="gid://shopify/Collection/9", title="Lifts", handle="lifts", rules=[])
    patch_store(monkeypatch, custom, [BOOM_LIFT])

    result = await related_collections.get_related_collections("lifts", shopify_client=object())

    assert result.by_category == []


@pytest.mark.asyncio
async def test_unknown_handle(monkeypatch):
    patch_store(monkeypatch, None, [BOOM_LIFT])

    with pytest.raises(NotFoundError):
        await related_collections.get_related_collections("nope", shopify_client=object())


def test_route_uses_camel_case_keys(monkeypatch):
    async def fake(handle, include_without_image=False):
        return RelatedCollectionsResult()

    monkeypatch.setattr(collections_route, "get_related_collections", fake)

    response = TestClient(app).get("/related-collections/boom-lift")

    assert response.status_code == 200
    assert set(response.json()) == {"byCategory", "byManufacturer", "bySizeItem", "bySpecs", "parts"}


@pytest.mark.parametrize("error, status", [(NotFoundError("missing"), 404), (TransientNetworkError("down"), 502)])
def test_route_error_statuses(monkeypatch, error, status):
    async def fake(handle, include_without_image=False):
        raise error

    monkeypatch.setattr(collections_route, "get_related_collections", fake)

    response = TestClient(app).get("/related-collections/boom-lift")

    assert response.status_code == status
    assert response.json()["success"] is False
