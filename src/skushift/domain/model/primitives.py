"""Domain primitives: scalar aliases + small helpers on localized values.

Scalar aliases may be promoted to proper value objects later without changing imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

type Sku = str
type EntryId = str
type ProductTypeId = str
type Locale = str
type LocalizedString = dict[Locale, str]
type JsonObject = dict[str, object]


def shares_localized_value(left: Mapping[Locale, str], right: Mapping[Locale, str]) -> bool:
    """Return whether both mappings hold the same value for at least one locale."""

    return any(right.get(locale) == value for locale, value in left.items())
