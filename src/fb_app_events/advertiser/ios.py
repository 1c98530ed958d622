"""iOS resolver backed by App Tracking Transparency and the IDFA."""

import asyncio
import enum
from typing import Optional, Protocol, Tuple

from fb_app_events.advertiser.base import AdvertiserIdResolver
from fb_app_events.errors import ResolutionFailure
from fb_app_events.tracking import TrackingSettings

# ATTrackingManager only exists from iOS 14 on.
ATT_MIN_VERSION = (14, 0, 0)


class TrackingAuthorizationStatus(str, enum.Enum):
    NOT_DETERMINED = "not_determined"
    RESTRICTED = "restricted"
    DENIED = "denied"
    AUTHORIZED = "authorized"


class TrackingManager(Protocol):
    """Bridge to ATTrackingManager, ASIdentifierManager and NSProcessInfo."""

    def os_version(self) -> Tuple[int, int, int]: ...

    def tracking_authorization_status(self) -> TrackingAuthorizationStatus: ...

    def is_advertising_tracking_enabled(self) -> bool: ...

    def advertising_identifier(self) -> Optional[str]: ...


class IOSAdvertiserIdResolver(AdvertiserIdResolver):
    """
    Uses the ATT authorization status on iOS 14+ and the legacy
    ``isAdvertisingTrackingEnabled`` flag on older systems.

    The status is only read, never requested, so no dialog is shown.
    """

    extinfo_version = "i2"

    def __init__(self, manager: TrackingManager, tracking: Optional[TrackingSettings] = None):
        super().__init__(tracking)
        self.manager = manager

    @property
    def platform(self) -> str:
        return "ios"

    def _read_consent(self) -> bool:
        if tuple(self.manager.os_version()) >= ATT_MIN_VERSION:
            status = TrackingAuthorizationStatus(self.manager.tracking_authorization_status())
            return status is TrackingAuthorizationStatus.AUTHORIZED
        return bool(self.manager.is_advertising_tracking_enabled())

    async def _query_tracking_enabled(self) -> bool:
        try:
            return await asyncio.to_thread(self._read_consent)
        except Exception as e:
            raise ResolutionFailure(f"iOS tracking status lookup failed: {e}") from e

    async def _query_advertiser_id(self) -> Optional[str]:
        try:
            return await asyncio.to_thread(self.manager.advertising_identifier)
        except Exception as e:
            raise ResolutionFailure(f"IDFA lookup failed: {e}") from e
