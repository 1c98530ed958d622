"""Base advertiser-id resolver."""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from fb_app_events.schemas import AdvertiserIdentity
from fb_app_events.tracking import TrackingSettings, tracking_settings

log = structlog.get_logger()

# Returned by both platforms when the user has reset or limited the id.
ZERO_ADVERTISER_ID = "00000000-0000-0000-0000-000000000000"


def normalize_advertiser_id(value: Optional[str]) -> Optional[str]:
    """Map empty and all-zero placeholder ids to ``None``."""
    if not value or value == ZERO_ADVERTISER_ID:
        return None
    return value


class AdvertiserIdResolver(ABC):
    """Resolves tracking consent and the advertising id for one platform.

    Subclasses only implement the two raw platform queries. The override
    lookup, the fail-closed handling and the rule that no id is read while
    tracking is disabled all live here so every platform gets them.
    """

    #: First element of the ``extinfo`` array for this platform.
    extinfo_version: str = ""

    def __init__(self, tracking: Optional[TrackingSettings] = None):
        self.tracking = tracking or tracking_settings

    @property
    @abstractmethod
    def platform(self) -> str:
        """Return the platform name (e.g. "android")."""
        pass

    @abstractmethod
    async def _query_tracking_enabled(self) -> bool:
        """Ask the platform whether advertising tracking is allowed.

        Raises:
            ResolutionFailure: If the platform query fails
        """
        pass

    @abstractmethod
    async def _query_advertiser_id(self) -> Optional[str]:
        """Read the raw advertising identifier from the platform.

        Raises:
            ResolutionFailure: If the platform query fails
        """
        pass

    async def is_tracking_enabled(self) -> bool:
        """Whether tracking is allowed. The manual override wins over the platform."""
        manual = self.tracking.manual_tracking_value()
        if manual is not None:
            log.debug("advertiser.tracking.override", platform=self.platform, enabled=manual)
            return manual

        try:
            enabled = await self._query_tracking_enabled()
        except Exception as e:
            log.warning(
                "advertiser.tracking.query_failed", platform=self.platform, error=str(e)
            )
            return False
        log.debug("advertiser.tracking.status", platform=self.platform, enabled=enabled)
        return bool(enabled)

    async def get_advertiser_id(self) -> Optional[str]:
        """The advertising id, or ``None`` if tracking is off or no real id exists."""
        if not await self.is_tracking_enabled():
            return None
        return await self._fetch_id()

    async def resolve_identity(self) -> AdvertiserIdentity:
        """Resolve tracking consent and, when allowed, the advertising id.

        Never raises: any unexpected failure resolves to tracking disabled.
        """
        try:
            if not await self.is_tracking_enabled():
                return AdvertiserIdentity.disabled()
            return AdvertiserIdentity(id=await self._fetch_id(), tracking_enabled=True)
        except Exception as e:
            log.error(
                "advertiser.resolve.failed",
                platform=self.platform,
                error=str(e),
                exc_info=True,
            )
            return AdvertiserIdentity.disabled()

    async def _fetch_id(self) -> Optional[str]:
        # Only called once tracking is known to be enabled.
        try:
            return normalize_advertiser_id(await self._query_advertiser_id())
        except Exception as e:
            log.warning("advertiser.id.query_failed", platform=self.platform, error=str(e))
            return None
