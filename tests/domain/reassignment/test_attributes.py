from __future__ import annotations

import pytest

from skushift.domain.errors import SameForAllConflictError
from skushift.domain.reassignment.attributes import (
    retain_existing_attributes,
    strip_blacklisted,
    validate_same_for_all,
)
from tests.helpers.catalog import make_draft, make_variant


def test_differing_same_for_all_values_are_rejected() -> None:
    draft = make_draft("1", "2", attributes={"1": {"color": "red"}, "2": {"color": "blue"}})

    with pytest.raises(SameForAllConflictError) as excinfo:
        validate_same_for_all(draft, {"color"})

    assert excinfo.value.attribute == "color"
    assert excinfo.value.values == ("red", "blue")


def test_missing_values_do_not_conflict() -> None:
    draft = make_draft("1", "2", attributes={"1": {"color": "red"}})

    validate_same_for_all(draft, {"color"})


def test_blacklisted_attributes_are_not_validated() -> None:
    draft = make_draft("1", "2", attributes={"1": {"color": "red"}, "2": {"color": "blue"}})

    validate_same_for_all(draft, {"color"}, blacklist={"color"})


def test_strip_blacklisted_drops_only_blacklisted_same_for_all() -> None:
    variant = make_variant("1", color="red", size="L", material="wool")

    stripped = strip_blacklisted(variant, {"color", "size"}, blacklist={"color", "material"})

    assert stripped.attributes == {"size": "L", "material": "wool"}
    assert variant.attributes["color"] == "red"


def test_strip_blacklisted_returns_untouched_variant() -> None:
    variant = make_variant("1", size="L")

    assert strip_blacklisted(variant, {"color"}, blacklist={"color"}) is variant


def test_retain_copies_attributes_and_fields_from_previous_variant() -> None:
    incoming = make_variant("1", size="L", color="red")
    previous = make_variant("1", size="M")
    previous.prices = [{"value": {"currencyCode": "EUR", "centAmount": 999}}]

    (retained,) = retain_existing_attributes(
        [incoming], {"1": previous}, ["size", "color", "prices"]
    )

    assert retained.attributes == {"size": "M", "color": "red"}
    assert retained.prices == previous.prices
    assert incoming.attributes["size"] == "L"


def test_retain_skips_variants_without_previous_copy() -> None:
    incoming = make_variant("2", size="L")

    assert retain_existing_attributes([incoming], {}, ["size"]) == [incoming]
