from shop_by_specs.catalog.combinations import generate_combinations
from shop_by_specs.catalog.models import ProductAttributeSet


def test_all_attributes_give_sixteen_distinct_combinations():
    attrs = ProductAttributeSet(
        condition="Used", vendor="Genie", product_type="Boom Lift", size="30'-46'", fuel_type="Electric"
    )

    combos = generate_combinations(attrs)

    assert len(combos) == 16
    assert len({tuple(sorted(c.items())) for c in combos}) == 16
    assert all(c["product_type"] == "Boom Lift" for c in combos)
    assert {"product_type": "Boom Lift"} in combos


def test_empty_attributes_do_not_produce_collapsed_duplicates():
    attrs = ProductAttributeSet(vendor="Genie", product_type="Boom Lift", condition="Used")

    combos = generate_combinations(attrs)

    assert len(combos) == 4
    assert {"product_type": "Boom Lift"} in combos
    assert {"product_type": "Boom Lift", "vendor": "Genie"} in combos
    assert {"product_type": "Boom Lift", "condition": "Used"} in combos
    assert {"product_type": "Boom Lift", "condition": "Used", "vendor": "Genie"} in combos


def test_product_type_only():
    assert generate_combinations(ProductAttributeSet(product_type="Scissor Lift")) == [
        {"product_type": "Scissor Lift"}
    ]


def test_missing_product_type_yields_nothing():
    attrs = ProductAttributeSet(vendor="Genie", condition="Used")
    assert generate_combinations(attrs) == []
