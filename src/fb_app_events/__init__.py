"""Facebook App Events for Python mobile apps."""

from fb_app_events.advertiser import (
    AdvertiserIdResolver,
    AndroidAdvertiserIdResolver,
    IOSAdvertiserIdResolver,
    get_advertiser_resolver,
)
from fb_app_events.bootstrap import use_facebook_events, use_facebook_events_from_settings
from fb_app_events.errors import (
    FacebookAppEventsError,
    NotInitializedError,
    ResolutionFailure,
    TransportError,
    ValidationError,
)
from fb_app_events.events import (
    create_activate_app_event,
    create_add_to_cart_event,
    create_custom_event,
    create_login_event,
    create_purchase_event,
    create_remove_from_cart_event,
    create_screen_view_event,
    create_search_event,
)
from fb_app_events.schemas import AdvertiserIdentity, ContentItem, Event, ExtInfo
from fb_app_events.sender import (
    EventSender,
    get_instance,
    initialize_instance,
    reset_instance,
    send_events,
)
from fb_app_events.tracking import (
    TrackingSettings,
    clear_manual_tracking,
    has_manual_tracking_value,
    manual_tracking_value,
    set_advertiser_tracking_enabled,
    tracking_settings,
)

__all__ = [
    "AdvertiserIdResolver",
    "AdvertiserIdentity",
    "AndroidAdvertiserIdResolver",
    "ContentItem",
    "Event",
    "EventSender",
    "ExtInfo",
    "FacebookAppEventsError",
    "IOSAdvertiserIdResolver",
    "NotInitializedError",
    "ResolutionFailure",
    "TrackingSettings",
    "TransportError",
    "ValidationError",
    "clear_manual_tracking",
    "create_activate_app_event",
    "create_add_to_cart_event",
    "create_custom_event",
    "create_login_event",
    "create_purchase_event",
    "create_remove_from_cart_event",
    "create_screen_view_event",
    "create_search_event",
    "get_advertiser_resolver",
    "get_instance",
    "has_manual_tracking_value",
    "initialize_instance",
    "manual_tracking_value",
    "reset_instance",
    "send_events",
    "set_advertiser_tracking_enabled",
    "tracking_settings",
    "use_facebook_events",
    "use_facebook_events_from_settings",
]
