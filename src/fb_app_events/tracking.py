"""Manual advertiser-tracking (ATE) override.

Apps that show the tracking-permission dialog themselves, for example to
coordinate consent with another SDK, record the answer here. Resolvers then
use it instead of querying the platform.
"""

import threading
from typing import Optional

import structlog

log = structlog.get_logger()


class TrackingSettings:
    """Holds an optional manual tracking decision, safe to share across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._manual_value: Optional[bool] = None

    def set_advertiser_tracking_enabled(self, enabled: bool) -> None:
        with self._lock:
            self._manual_value = bool(enabled)
        log.debug("tracking.override.set", enabled=bool(enabled))

    def clear_manual_tracking(self) -> None:
        """Revert to querying the platform on every resolution."""
        with self._lock:
            self._manual_value = None
        log.debug("tracking.override.cleared")

    def has_manual_tracking_value(self) -> bool:
        return self.manual_tracking_value() is not None

    def manual_tracking_value(self) -> Optional[bool]:
        with self._lock:
            return self._manual_value


# Shared by every resolver that is not handed its own instance.
tracking_settings = TrackingSettings()


def set_advertiser_tracking_enabled(enabled: bool) -> None:
    tracking_settings.set_advertiser_tracking_enabled(enabled)


def clear_manual_tracking() -> None:
    tracking_settings.clear_manual_tracking()


def has_manual_tracking_value() -> bool:
    return tracking_settings.has_manual_tracking_value()


def manual_tracking_value() -> Optional[bool]:
    return tracking_settings.manual_tracking_value()
