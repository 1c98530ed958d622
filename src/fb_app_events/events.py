"""Factory functions for the standard Facebook app events.

Callers build events through these functions instead of assembling
``Event`` instances by hand, so every event leaving the process carries the
fields the Graph API expects for its category.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import pydantic

from fb_app_events.errors import ValidationError
from fb_app_events.schemas import ContentItem, Event

PURCHASE = "fb_mobile_purchase"
ADD_TO_CART = "fb_mobile_add_to_cart"
REMOVE_FROM_CART = "fb_mobile_remove_from_cart"
CONTENT_VIEW = "fb_mobile_content_view"
LOGIN = "fb_mobile_login"
SEARCH = "fb_mobile_search"
ACTIVATE_APP = "fb_mobile_activate_app"

ItemLike = Union[ContentItem, Mapping[str, Any], Tuple[str, int]]


def _to_item(item: ItemLike) -> ContentItem:
    if isinstance(item, ContentItem):
        return item
    if isinstance(item, (str, bytes)):
        raise ValidationError(f"Content item {item!r} must be an (id, quantity) pair.")
    if isinstance(item, Mapping):
        return ContentItem(**item)
    item_id, quantity = item
    return ContentItem(id=item_id, quantity=quantity)


def _to_items(items: Optional[Iterable[ItemLike]]) -> Tuple[ContentItem, ...]:
    if items is None:
        return ()
    try:
        return tuple(_to_item(item) for item in items)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid content item: {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Content items must be (id, quantity) pairs: {e}") from e


def _to_decimal(value: Union[int, float, str, Decimal]) -> Decimal:
    # str() keeps 49.98 from turning into 49.97999999...
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as e:
        raise ValidationError(f"'{value}' is not a number") from e
    if not number.is_finite():
        raise ValidationError(f"'{value}' is not a finite number")
    return number


def _build(**fields: Any) -> Event:
    try:
        return Event(**fields)
    except pydantic.ValidationError as e:
        raise ValidationError(str(e)) from e


def _require_items(items: Optional[Iterable[ItemLike]]) -> Tuple[ContentItem, ...]:
    content_items = _to_items(items)
    if not content_items:
        raise ValidationError("At least one content item is required.")
    return content_items


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} must not be empty.")
    return value


def create_purchase_event(
    items: Iterable[ItemLike],
    total_value: Union[int, float, str, Decimal],
    currency: str,
) -> Event:
    """Event for a completed purchase of ``items`` worth ``total_value``."""
    content_items = _require_items(items)
    currency = _require_text(currency, "Currency")
    value = _to_decimal(total_value)
    if value < 0:
        raise ValidationError("Purchase value must not be negative.")
    return _build(
        event_name=PURCHASE,
        content_items=content_items,
        content_type="product",
        value_to_sum=value,
        currency=currency,
    )


def create_add_to_cart_event(items: Iterable[ItemLike]) -> Event:
    return _build(
        event_name=ADD_TO_CART,
        content_items=_require_items(items),
        content_type="product",
    )


def create_remove_from_cart_event(items: Iterable[ItemLike]) -> Event:
    return _build(
        event_name=REMOVE_FROM_CART,
        content_items=_require_items(items),
        content_type="product",
    )


def create_screen_view_event(screen_name: str) -> Event:
    """Event for the user viewing the screen called ``screen_name``."""
    screen_name = _require_text(screen_name, "Screen name")
    return _build(
        event_name=CONTENT_VIEW,
        content_type="screen",
        parameters={"fb_content_id": screen_name},
    )


def create_login_event() -> Event:
    return _build(event_name=LOGIN)


def create_search_event(query: str) -> Event:
    query = _require_text(query, "Search query")
    return _build(event_name=SEARCH, parameters={"fb_search_string": query})


def create_activate_app_event() -> Event:
    """The app-launch event logged once at startup."""
    return _build(event_name=ACTIVATE_APP)


def create_custom_event(
    event_name: str,
    content_type: Optional[str] = None,
    items: Optional[Iterable[ItemLike]] = None,
    value_to_sum: Optional[Union[int, float, str, Decimal]] = None,
    currency: Optional[str] = None,
    parameters: Optional[Dict[str, str]] = None,
) -> Event:
    """
    Build an event with an arbitrary name.

    Every optional field is validated independently when given: the value
    must be non-negative, the currency a 3-letter code, and each item a
    non-empty id with a non-negative quantity.
    """
    event_name = _require_text(event_name, "Event name")
    value = None
    if value_to_sum is not None:
        value = _to_decimal(value_to_sum)
        if value < 0:
            raise ValidationError("Event value must not be negative.")
    return _build(
        event_name=event_name,
        content_type=content_type,
        content_items=_to_items(items),
        value_to_sum=value,
        currency=currency,
        parameters=dict(parameters or {}),
    )
