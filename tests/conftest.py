"""Shared fixtures: fake platform bridges and a recording HTTP transport."""

from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from fb_app_events.advertiser import AndroidAdvertiserIdResolver
from fb_app_events.advertiser.ios import TrackingAuthorizationStatus
from fb_app_events.sender import reset_instance
from fb_app_events.tracking import TrackingSettings

REAL_ID = "38400000-8cf0-11bd-b23e-10b96e40000d"


@pytest.fixture(autouse=True)
def _reset_default_sender():
    """Unbind the process-wide sender between tests."""
    reset_instance()
    yield
    reset_instance()


@dataclass
class FakeAdvertisingInfo:
    id: Optional[str]
    is_limit_ad_tracking_enabled: bool


class FakeAdvertisingIdClient:
    """Records how often Google Play services would have been queried."""

    def __init__(self, advertiser_id=REAL_ID, limit_ad_tracking=False, error=None):
        self.advertiser_id = advertiser_id
        self.limit_ad_tracking = limit_ad_tracking
        self.error = error
        self.calls = 0

    def get_advertising_id_info(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return FakeAdvertisingInfo(self.advertiser_id, self.limit_ad_tracking)


class FakeTrackingManager:
    def __init__(
        self,
        os_version=(17, 0, 0),
        status=TrackingAuthorizationStatus.AUTHORIZED,
        legacy_enabled=True,
        idfa=REAL_ID,
        error=None,
    ):
        self.version = os_version
        self.status = status
        self.legacy_enabled = legacy_enabled
        self.idfa = idfa
        self.error = error
        self.idfa_reads = 0

    def os_version(self):
        return self.version

    def tracking_authorization_status(self):
        if self.error is not None:
            raise self.error
        return self.status

    def is_advertising_tracking_enabled(self):
        return self.legacy_enabled

    def advertising_identifier(self):
        self.idfa_reads += 1
        return self.idfa


class RecordingTransport:
    """Handler for httpx.MockTransport that keeps every request it sees."""

    def __init__(self, status_code: int = 200, error: Optional[Exception] = None):
        self.status_code = status_code
        self.error = error
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json={"success": self.status_code == 200})

    def form(self, index: int = 0) -> dict:
        parsed = parse_qs(self.requests[index].content.decode())
        return {key: values[0] for key, values in parsed.items()}


@pytest.fixture
def tracking():
    return TrackingSettings()


@pytest.fixture
def android_client():
    return FakeAdvertisingIdClient()


@pytest.fixture
def android_resolver(android_client, tracking):
    return AndroidAdvertiserIdResolver(android_client, tracking)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
async def http_client(transport):
    async with httpx.AsyncClient(transport=httpx.MockTransport(transport)) as client:
        yield client
