"""Sale categories and their fixed routing.

Each queue entry carries a SaleCategory tag. The reconciler dispatches on
the tag through CATEGORY_SPECS instead of matching endpoint strings.
"""
from dataclasses import dataclass
from enum import Enum

from arthub.core.constants import (
    ENDPOINT_GIFT_SALES,
    ENDPOINT_SALES,
    ENDPOINT_STATIONERY_SALES,
    OFFLINE_GIFT_SALES_KEY,
    OFFLINE_ID_PREFIX,
    OFFLINE_SALES_KEY,
    OFFLINE_STATIONERY_SALES_KEY,
    TABLE_GIFT_DAILY_SALES,
    TABLE_STATIONERY_DAILY_SALES,
    TABLE_STATIONERY_SALES,
)
from arthub.core.receipt import StopRule


class SaleCategory(str, Enum):
    """Sale categories that can be recorded offline."""
    STATIONERY = "stationery"
    GIFT = "gift"
    STATIONERY_DAILY = "stationery_daily"


@dataclass(frozen=True)
class CategorySpec:
    """Where a category's records live locally and remotely."""
    category: SaleCategory
    storage_key: str
    endpoint: str
    table: str
    id_prefix: str
    required_fields: tuple[str, ...]
    fields: tuple[str, ...]


CATEGORY_SPECS: dict[SaleCategory, CategorySpec] = {
    SaleCategory.STATIONERY: CategorySpec(
        category=SaleCategory.STATIONERY,
        storage_key=OFFLINE_SALES_KEY,
        endpoint=ENDPOINT_SALES,
        table=TABLE_STATIONERY_SALES,
        id_prefix=OFFLINE_ID_PREFIX,
        required_fields=("item_id", "quantity"),
        fields=("item_id", "quantity", "selling_price", "total_amount", "profit", "sold_by"),
    ),
    SaleCategory.GIFT: CategorySpec(
        category=SaleCategory.GIFT,
        storage_key=OFFLINE_GIFT_SALES_KEY,
        endpoint=ENDPOINT_GIFT_SALES,
        table=TABLE_GIFT_DAILY_SALES,
        id_prefix=OFFLINE_ID_PREFIX,
        required_fields=("item", "quantity"),
        fields=("item", "code", "quantity", "unit", "bpx", "spx", "sold_by"),
    ),
    SaleCategory.STATIONERY_DAILY: CategorySpec(
        category=SaleCategory.STATIONERY_DAILY,
        storage_key=OFFLINE_STATIONERY_SALES_KEY,
        endpoint=ENDPOINT_STATIONERY_SALES,
        table=TABLE_STATIONERY_DAILY_SALES,
        id_prefix=OFFLINE_ID_PREFIX,
        required_fields=("item", "quantity"),
        fields=("category", "item", "description", "quantity", "rate", "selling_price", "sold_by"),
    ),
}

_BY_ENDPOINT = {spec.endpoint: spec for spec in CATEGORY_SPECS.values()}


def get_spec(category: SaleCategory | str) -> CategorySpec:
    """Look up a category spec by enum member or value.

    Raises:
        StopRule: If the category is unknown
    """
    try:
        return CATEGORY_SPECS[SaleCategory(category)]
    except ValueError:
        raise StopRule(f"Unknown sale category: {category!r}")


def spec_for_endpoint(endpoint: str) -> CategorySpec:
    """Look up a category spec by its endpoint tag.

    Raises:
        StopRule: If no category owns the endpoint
    """
    spec = _BY_ENDPOINT.get(endpoint)
    if spec is None:
        raise StopRule(f"No sale category for endpoint: {endpoint!r}")
    return spec


def spec_for_entry(entry: dict) -> CategorySpec:
    """Resolve the category of a queue entry.

    Entries written without a category tag are resolved from their endpoint.
    """
    category = entry.get("category")
    if category is None:
        return spec_for_endpoint(entry.get("endpoint", ""))
    return get_spec(category)
