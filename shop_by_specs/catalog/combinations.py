from shop_by_specs.catalog.models import OPTIONAL_ATTRIBUTES, PRODUCT_TYPE, ProductAttributeSet


def generate_combinations(attributes: ProductAttributeSet) -> list[dict[str, str]]:
    """
    Every attribute subset that contains the product type.

    The optional attributes form a 4-bit mask (condition, vendor, size,
    fuel type). A mask that selects an empty attribute has the same content
    as the mask without that bit, so it is skipped. The result holds exactly
    2**k distinct combinations, k being the number of non-empty optional
    attributes. No product type, no combinations.
    """
    if not attributes.product_type:
        return []

    combinations = []
    for mask in range(2 ** len(OPTIONAL_ATTRIBUTES)):
        combo = {PRODUCT_TYPE: attributes.product_type}
        collapsed = False

        for bit, name in enumerate(OPTIONAL_ATTRIBUTES):
            if not mask & (1 << bit):
                continue
            value = attributes.get(name)
            if not value:
                collapsed = True
                break
            combo[name] = value

        if not collapsed:
            combinations.append(combo)

    return combinations
