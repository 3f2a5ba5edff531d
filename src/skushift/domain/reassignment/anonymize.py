"""Anonymization of slugs and keys for backup entries.

Backup entries keep displaced variants addressable without competing with live
catalog data: every slug value gets a token suffix, the token itself is stored
under the ``ctsd`` marker locale, and the key gets the same token.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final
from uuid import uuid4

if TYPE_CHECKING:
    from collections.abc import Mapping

    from skushift.domain.model import Draft, LocalizedString

ANONYMIZED_SLUG_MARKER: Final[str] = "ctsd"


def utcnow() -> datetime:
    return datetime.now(UTC)


def epoch_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)


@dataclass(slots=True)
class Anonymizer:
    """Produce slugs and keys guaranteed not to collide with existing entries.

    Tokens combine the current epoch milliseconds with a random suffix, so two
    backups created within the same millisecond still differ.
    """

    clock: Callable[[], datetime] = field(default=utcnow)
    suffix_factory: Callable[[], str] = field(default=lambda: uuid4().hex[:8])

    def new_token(self) -> str:
        return f"{epoch_millis(self.clock())}{self.suffix_factory()}"

    def slug(self, slug: Mapping[str, str], *, token: str | None = None) -> LocalizedString:
        active_token = token or self.new_token()
        anonymized = {
            locale: f"{value}_{active_token}"
            for locale, value in slug.items()
            if locale != ANONYMIZED_SLUG_MARKER
        }
        anonymized[ANONYMIZED_SLUG_MARKER] = active_token
        return anonymized

    def draft(self, draft: Draft) -> Draft:
        token = self.new_token()
        return replace(
            draft,
            slug=self.slug(draft.slug, token=token),
            key=f"{draft.key}-{token}" if draft.key else None,
        )


def is_anonymized(slug: Mapping[str, str]) -> bool:
    return ANONYMIZED_SLUG_MARKER in slug
