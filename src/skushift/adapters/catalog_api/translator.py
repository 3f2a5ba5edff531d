"""Translate catalog REST payloads to domain values and back."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from skushift.domain.model import (
    AddVariant,
    CatalogEntry,
    ChangeMasterVariant,
    ChangeProductType,
    ChangeSlug,
    Draft,
    EntryData,
    Publish,
    RemoveVariant,
    Variant,
)

from .schema import (
    PRODUCT_TYPE_ID,
    STATE_TYPE_ID,
    TAX_CATEGORY_TYPE_ID,
    AttributePayload,
    ProductDataPayload,
    ProductDraftPayload,
    ProductPayload,
    ReferencePayload,
    VariantPayload,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from skushift.domain.model import UpdateAction

    from .schema import ProductDraftPayloadInput, ProductPayloadInput


def _ensure_product(payload: ProductPayloadInput) -> ProductPayload:
    if isinstance(payload, ProductPayload):
        return payload
    return ProductPayload.model_validate(payload)


def _ensure_draft(payload: ProductDraftPayloadInput) -> ProductDraftPayload:
    if isinstance(payload, ProductDraftPayload):
        return payload
    return ProductDraftPayload.model_validate(payload)


def _reference_id(reference: ReferencePayload | None) -> str | None:
    return reference.id if reference is not None else None


def _reference(type_id: str, entity_id: str | None) -> dict[str, str] | None:
    if entity_id is None:
        return None
    return {"typeId": type_id, "id": entity_id}


def parse_variant(payload: VariantPayload) -> Variant:
    return Variant(
        sku=payload.sku,
        key=payload.key,
        attributes={attribute.name: attribute.value for attribute in payload.attributes},
        prices=[dict(price) for price in payload.prices],
        images=[dict(image) for image in payload.images],
        variant_id=payload.id,
    )


def _parse_data(payload: ProductDataPayload) -> EntryData:
    return EntryData(
        master_variant=parse_variant(payload.master_variant),
        variants=[parse_variant(variant) for variant in payload.variants],
        name=dict(payload.name),
        slug=dict(payload.slug),
    )


def parse_entry(payload: ProductPayloadInput) -> CatalogEntry:
    product = _ensure_product(payload)
    master_data = product.master_data
    return CatalogEntry(
        id=product.id,
        version=product.version,
        key=product.key,
        product_type_id=product.product_type.id,
        tax_category_id=_reference_id(product.tax_category),
        state_id=_reference_id(product.state),
        published=master_data.published,
        staged=_parse_data(master_data.staged),
        current=_parse_data(master_data.current) if master_data.current is not None else None,
    )


def parse_draft(payload: ProductDraftPayloadInput) -> Draft:
    draft = _ensure_draft(payload)
    return Draft(
        product_type_id=draft.product_type.id,
        key=draft.key,
        name=dict(draft.name),
        slug=dict(draft.slug),
        master_variant=parse_variant(draft.master_variant),
        variants=[parse_variant(variant) for variant in draft.variants],
        tax_category_id=_reference_id(draft.tax_category),
        state_id=_reference_id(draft.state),
    )


def _attributes_payload(attributes: Mapping[str, object]) -> list[dict[str, Any]]:
    return [
        AttributePayload(name=name, value=value).model_dump(by_alias=True)
        for name, value in attributes.items()
    ]


def variant_to_payload(variant: Variant) -> dict[str, Any]:
    body: dict[str, Any] = {"sku": variant.sku}
    if variant.key is not None:
        body["key"] = variant.key
    if variant.prices:
        body["prices"] = [dict(price) for price in variant.prices]
    if variant.images:
        body["images"] = [dict(image) for image in variant.images]
    if variant.attributes:
        body["attributes"] = _attributes_payload(variant.attributes)
    return body


def draft_to_payload(draft: Draft) -> dict[str, Any]:
    body: dict[str, Any] = {
        "productType": _reference(PRODUCT_TYPE_ID, draft.product_type_id),
        "name": dict(draft.name),
        "slug": dict(draft.slug),
        "masterVariant": variant_to_payload(draft.master_variant),
        "variants": [variant_to_payload(variant) for variant in draft.variants],
    }
    if draft.key is not None:
        body["key"] = draft.key
    tax_category = _reference(TAX_CATEGORY_TYPE_ID, draft.tax_category_id)
    if tax_category is not None:
        body["taxCategory"] = tax_category
    state = _reference(STATE_TYPE_ID, draft.state_id)
    if state is not None:
        body["state"] = state
    return body


def action_to_payload(action: UpdateAction) -> dict[str, Any]:
    match action:
        case AddVariant():
            body = variant_to_payload(
                Variant(
                    sku=action.sku,
                    key=action.key,
                    prices=list(action.prices),
                    images=list(action.images),
                    attributes=dict(action.attributes),
                )
            )
            return {"action": "addVariant", **body, "staged": True}
        case RemoveVariant(sku=sku):
            return {"action": "removeVariant", "sku": sku, "staged": True}
        case ChangeMasterVariant(sku=sku):
            return {"action": "changeMasterVariant", "sku": sku, "staged": True}
        case ChangeProductType(product_type_id=product_type_id):
            return {
                "action": "changeProductType",
                "productType": _reference(PRODUCT_TYPE_ID, product_type_id),
            }
        case ChangeSlug(slug=slug):
            return {"action": "changeSlug", "slug": dict(slug), "staged": True}
        case Publish():
            return {"action": "publish"}


def update_payload(version: int, actions: list[UpdateAction]) -> dict[str, Any]:
    return {"version": version, "actions": [action_to_payload(action) for action in actions]}
