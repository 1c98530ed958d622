"""Tests for the platform advertiser-id resolvers."""

import pytest

from conftest import REAL_ID, FakeAdvertisingIdClient, FakeTrackingManager
from fb_app_events.advertiser import (
    ZERO_ADVERTISER_ID,
    AndroidAdvertiserIdResolver,
    IOSAdvertiserIdResolver,
    get_advertiser_resolver,
    normalize_advertiser_id,
)
from fb_app_events.advertiser.ios import TrackingAuthorizationStatus
from fb_app_events.errors import ValidationError
from fb_app_events.schemas import AdvertiserIdentity


def _android(tracking, **kwargs):
    return AndroidAdvertiserIdResolver(FakeAdvertisingIdClient(**kwargs), tracking)


def _ios(tracking, **kwargs):
    return IOSAdvertiserIdResolver(FakeTrackingManager(**kwargs), tracking)


@pytest.mark.parametrize("value", [None, "", ZERO_ADVERTISER_ID])
def test_normalize_placeholder_ids(value):
    assert normalize_advertiser_id(value) is None


def test_identity_never_carries_id_when_disabled():
    identity = AdvertiserIdentity(id=REAL_ID, tracking_enabled=False)
    assert identity.id is None


# -------------------------
# Manual override
# -------------------------


@pytest.mark.parametrize("make", [_android, _ios])
async def test_override_false_wins_over_platform(make, tracking):
    tracking.set_advertiser_tracking_enabled(False)
    resolver = make(tracking)

    identity = await resolver.resolve_identity()

    assert identity == AdvertiserIdentity(id=None, tracking_enabled=False)


async def test_override_false_never_queries_platform(tracking):
    client = FakeAdvertisingIdClient()
    tracking.set_advertiser_tracking_enabled(False)

    await AndroidAdvertiserIdResolver(client, tracking).resolve_identity()

    assert client.calls == 0


async def test_override_true_returns_real_id(tracking):
    tracking.set_advertiser_tracking_enabled(True)
    # The platform says "limited", but the override takes precedence.
    resolver = _android(tracking, limit_ad_tracking=True)

    identity = await resolver.resolve_identity()

    assert identity == AdvertiserIdentity(id=REAL_ID, tracking_enabled=True)


@pytest.mark.parametrize("make", [_android, _ios])
async def test_override_true_with_placeholder_id(make, tracking):
    tracking.set_advertiser_tracking_enabled(True)
    if make is _android:
        kwargs = {"advertiser_id": ZERO_ADVERTISER_ID}
    else:
        kwargs = {"idfa": ZERO_ADVERTISER_ID}

    identity = await make(tracking, **kwargs).resolve_identity()

    assert identity == AdvertiserIdentity(id=None, tracking_enabled=True)


async def test_clearing_override_reverts_to_platform(tracking):
    resolver = _android(tracking, limit_ad_tracking=True)
    tracking.set_advertiser_tracking_enabled(True)
    assert (await resolver.resolve_identity()).tracking_enabled

    tracking.clear_manual_tracking()

    assert await resolver.resolve_identity() == AdvertiserIdentity.disabled()


# -------------------------
# Android
# -------------------------


async def test_android_tracking_allowed(tracking):
    identity = await _android(tracking).resolve_identity()
    assert identity == AdvertiserIdentity(id=REAL_ID, tracking_enabled=True)


async def test_android_limit_ad_tracking_hides_id(tracking):
    resolver = _android(tracking, limit_ad_tracking=True)

    assert await resolver.resolve_identity() == AdvertiserIdentity.disabled()
    assert await resolver.get_advertiser_id() is None


async def test_android_query_failure_fails_closed(tracking):
    resolver = _android(tracking, error=RuntimeError("play services unavailable"))

    assert await resolver.is_tracking_enabled() is False
    assert await resolver.resolve_identity() == AdvertiserIdentity.disabled()


async def test_android_id_failure_keeps_tracking_enabled(tracking):
    tracking.set_advertiser_tracking_enabled(True)
    resolver = _android(tracking, error=RuntimeError("binder died"))

    identity = await resolver.resolve_identity()

    assert identity == AdvertiserIdentity(id=None, tracking_enabled=True)


# -------------------------
# iOS
# -------------------------


async def test_ios_authorized(tracking):
    identity = await _ios(tracking).resolve_identity()
    assert identity == AdvertiserIdentity(id=REAL_ID, tracking_enabled=True)


@pytest.mark.parametrize(
    "status",
    [
        TrackingAuthorizationStatus.DENIED,
        TrackingAuthorizationStatus.RESTRICTED,
        TrackingAuthorizationStatus.NOT_DETERMINED,
    ],
)
async def test_ios_denied_never_reads_idfa(status, tracking):
    manager = FakeTrackingManager(status=status)

    identity = await IOSAdvertiserIdResolver(manager, tracking).resolve_identity()

    assert identity == AdvertiserIdentity.disabled()
    assert manager.idfa_reads == 0


async def test_ios_before_14_uses_legacy_flag(tracking):
    # ATT status is ignored on old systems.
    manager = FakeTrackingManager(
        os_version=(13, 7, 0),
        status=TrackingAuthorizationStatus.DENIED,
        legacy_enabled=True,
    )
    assert await IOSAdvertiserIdResolver(manager, tracking).is_tracking_enabled() is True

    manager.legacy_enabled = False
    assert await IOSAdvertiserIdResolver(manager, tracking).is_tracking_enabled() is False


async def test_ios_status_failure_fails_closed(tracking):
    resolver = _ios(tracking, error=RuntimeError("ATT unavailable"))
    assert await resolver.resolve_identity() == AdvertiserIdentity.disabled()


# -------------------------
# Factory
# -------------------------


def test_get_advertiser_resolver_picks_platform(tracking):
    android = get_advertiser_resolver("android", FakeAdvertisingIdClient(), tracking)
    ios = get_advertiser_resolver("iOS", FakeTrackingManager(), tracking)

    assert isinstance(android, AndroidAdvertiserIdResolver)
    assert android.extinfo_version == "a2"
    assert isinstance(ios, IOSAdvertiserIdResolver)
    assert ios.extinfo_version == "i2"
    assert ios.tracking is tracking


def test_get_advertiser_resolver_unknown_platform():
    with pytest.raises(ValidationError):
        get_advertiser_resolver("windows", object())
