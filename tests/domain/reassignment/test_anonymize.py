from __future__ import annotations

from datetime import UTC, datetime

from skushift.domain.reassignment import ANONYMIZED_SLUG_MARKER, Anonymizer, is_anonymized
from skushift.domain.reassignment.anonymize import epoch_millis
from tests.helpers.catalog import make_draft


def _fixed_anonymizer() -> Anonymizer:
    return Anonymizer(
        clock=lambda: datetime(2024, 1, 1, tzinfo=UTC),
        suffix_factory=lambda: "abc",
    )


def test_token_combines_epoch_millis_and_suffix() -> None:
    assert _fixed_anonymizer().new_token() == "1704067200000abc"


def test_epoch_millis_treats_naive_values_as_utc() -> None:
    assert epoch_millis(datetime(2024, 1, 1)) == 1_704_067_200_000  # noqa: DTZ001


def test_slug_suffixes_every_locale_and_records_token() -> None:
    slug = _fixed_anonymizer().slug({"en": "shirt", "de": "hemd"})

    assert slug == {
        "en": "shirt_1704067200000abc",
        "de": "hemd_1704067200000abc",
        ANONYMIZED_SLUG_MARKER: "1704067200000abc",
    }
    assert is_anonymized(slug)


def test_slug_reanonymization_replaces_the_marker() -> None:
    anonymizer = _fixed_anonymizer()

    slug = anonymizer.slug({"en": "shirt", ANONYMIZED_SLUG_MARKER: "old"}, token="new")

    assert slug == {"en": "shirt_new", ANONYMIZED_SLUG_MARKER: "new"}


def test_draft_shares_one_token_between_slug_and_key() -> None:
    draft = make_draft("1", key="shirt", slug={"en": "shirt"})

    anonymized = _fixed_anonymizer().draft(draft)

    assert anonymized.key == "shirt-1704067200000abc"
    assert anonymized.slug[ANONYMIZED_SLUG_MARKER] == "1704067200000abc"
    assert draft.slug == {"en": "shirt"}


def test_tokens_differ_within_one_millisecond() -> None:
    anonymizer = Anonymizer(clock=lambda: datetime(2024, 1, 1, tzinfo=UTC))

    assert anonymizer.new_token() != anonymizer.new_token()


def test_plain_slug_is_not_anonymized() -> None:
    assert not is_anonymized({"en": "shirt"})
