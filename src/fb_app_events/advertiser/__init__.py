"""Platform advertiser-id resolvers and the factory that picks one at startup."""

from typing import Any, Optional

from fb_app_events.advertiser.android import AndroidAdvertiserIdResolver
from fb_app_events.advertiser.base import (
    ZERO_ADVERTISER_ID,
    AdvertiserIdResolver,
    normalize_advertiser_id,
)
from fb_app_events.advertiser.ios import IOSAdvertiserIdResolver, TrackingAuthorizationStatus
from fb_app_events.errors import ValidationError
from fb_app_events.tracking import TrackingSettings

RESOLVERS = {
    "android": AndroidAdvertiserIdResolver,
    "ios": IOSAdvertiserIdResolver,
}


def get_advertiser_resolver(
    platform: str, bridge: Any, tracking: Optional[TrackingSettings] = None
) -> AdvertiserIdResolver:
    """Build the resolver for a deployment platform.

    Args:
        platform: "android" or "ios"
        bridge: The native bridge the resolver queries (an ``AdvertisingIdClient``
            on Android, a ``TrackingManager`` on iOS)
        tracking: Override state to consult; defaults to the shared instance

    Raises:
        ValidationError: If the platform is not supported
    """
    try:
        resolver_cls = RESOLVERS[platform.lower()]
    except KeyError:
        raise ValidationError(
            f"Unsupported platform: {platform}. Valid: {sorted(RESOLVERS)}."
        ) from None
    return resolver_cls(bridge, tracking)


__all__ = [
    "AdvertiserIdResolver",
    "AndroidAdvertiserIdResolver",
    "IOSAdvertiserIdResolver",
    "TrackingAuthorizationStatus",
    "ZERO_ADVERTISER_ID",
    "get_advertiser_resolver",
    "normalize_advertiser_id",
]
