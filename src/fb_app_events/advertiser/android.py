"""Android resolver backed by the Google Advertising ID (GAID)."""

import asyncio
from typing import Optional, Protocol

from fb_app_events.advertiser.base import AdvertiserIdResolver
from fb_app_events.errors import ResolutionFailure
from fb_app_events.tracking import TrackingSettings


class AdvertisingIdInfo(Protocol):
    """Mirror of ``AdvertisingIdClient.Info`` from Google Play services."""

    id: Optional[str]
    is_limit_ad_tracking_enabled: bool


class AdvertisingIdClient(Protocol):
    """Bridge to Google Play services. Its call blocks on a binder IPC."""

    def get_advertising_id_info(self) -> Optional[AdvertisingIdInfo]: ...


class AndroidAdvertiserIdResolver(AdvertiserIdResolver):
    """Reads consent from the limit-ad-tracking flag and the id from GAID."""

    extinfo_version = "a2"

    def __init__(self, client: AdvertisingIdClient, tracking: Optional[TrackingSettings] = None):
        super().__init__(tracking)
        self.client = client

    @property
    def platform(self) -> str:
        return "android"

    async def _get_info(self) -> Optional[AdvertisingIdInfo]:
        try:
            return await asyncio.to_thread(self.client.get_advertising_id_info)
        except Exception as e:
            raise ResolutionFailure(f"Android advertising id lookup failed: {e}") from e

    async def _query_tracking_enabled(self) -> bool:
        info = await self._get_info()
        return info is not None and not info.is_limit_ad_tracking_enabled

    async def _query_advertiser_id(self) -> Optional[str]:
        info = await self._get_info()
        return info.id if info is not None else None
