"""Port for attribute-level product-type rules."""

from __future__ import annotations

from collections.abc import Callable

from skushift.domain.model import ProductTypeId

SameForAllLookup = Callable[[ProductTypeId], frozenset[str]]
"""Return the names of attributes that must hold one value across all variants."""


def no_same_for_all_attributes(product_type_id: ProductTypeId) -> frozenset[str]:
    del product_type_id
    return frozenset()
