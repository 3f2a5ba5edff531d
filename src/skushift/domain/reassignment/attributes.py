"""Attribute handling for variants moving into a target entry.

Two concerns live here:
- same-for-all attributes must hold one value across all variants of an entry;
  a draft breaking that for a non-blacklisted attribute is rejected, while
  blacklisted attributes are dropped from incoming variants instead
- retained attributes keep the value a variant carried on its old entry
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from skushift.domain.errors import SameForAllConflictError

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

    from skushift.domain.model import Draft, Sku, Variant

log = getLogger(__name__)

_MISSING: Final = object()

VARIANT_FIELDS: Final[frozenset[str]] = frozenset({"key", "prices", "images", "attributes"})
"""Names that address a whole variant field rather than one attribute."""


def validate_same_for_all(
    draft: Draft,
    same_for_all: Collection[str],
    *,
    blacklist: Collection[str] = (),
) -> None:
    """Raise ``SameForAllConflictError`` when ``draft`` disagrees with itself."""

    for attribute in sorted(set(same_for_all) - set(blacklist)):
        values: list[object] = []
        for variant in draft.all_variants:
            value = variant.attributes.get(attribute, _MISSING)
            if value is _MISSING or value in values:
                continue
            values.append(value)
        if len(values) > 1:
            raise SameForAllConflictError(attribute, values)


def strip_blacklisted(
    variant: Variant,
    same_for_all: Collection[str],
    *,
    blacklist: Collection[str],
) -> Variant:
    """Drop blacklisted same-for-all attributes from ``variant``."""

    dropped = set(same_for_all).intersection(blacklist).intersection(variant.attributes)
    if not dropped:
        return variant
    log.debug("Dropping blacklisted same-for-all attributes %s from %s", dropped, variant.sku)
    attributes = {name: value for name, value in variant.attributes.items() if name not in dropped}
    return replace(variant, attributes=attributes)


def retain_existing_attributes(
    variants: Iterable[Variant],
    previous: Mapping[Sku, Variant],
    names: Collection[str],
) -> list[Variant]:
    """Copy ``names`` from the previous copy of each variant onto the incoming one."""

    if not names:
        return list(variants)

    retained: list[Variant] = []
    for variant in variants:
        old = previous.get(variant.sku)
        retained.append(variant if old is None else _retain(variant, old, names))
    return retained


def _retain(variant: Variant, old: Variant, names: Collection[str]) -> Variant:
    updated = variant.clone()
    for name in names:
        if name in VARIANT_FIELDS:
            setattr(updated, name, getattr(old.clone(), name))
        elif name in old.attributes:
            updated.attributes[name] = old.attributes[name]
    return updated
