"""Tests for the manual tracking override."""

import threading

from fb_app_events import tracking as tracking_module
from fb_app_events.tracking import TrackingSettings


def test_absent_by_default():
    settings = TrackingSettings()
    assert not settings.has_manual_tracking_value()
    assert settings.manual_tracking_value() is None


def test_set_and_clear():
    settings = TrackingSettings()

    settings.set_advertiser_tracking_enabled(False)
    assert settings.has_manual_tracking_value()
    assert settings.manual_tracking_value() is False

    settings.set_advertiser_tracking_enabled(True)
    assert settings.manual_tracking_value() is True

    settings.clear_manual_tracking()
    assert not settings.has_manual_tracking_value()


def test_module_functions_share_one_instance():
    try:
        tracking_module.set_advertiser_tracking_enabled(True)
        assert tracking_module.tracking_settings.manual_tracking_value() is True
        assert tracking_module.has_manual_tracking_value()
        assert tracking_module.manual_tracking_value() is True
    finally:
        tracking_module.clear_manual_tracking()
    assert tracking_module.manual_tracking_value() is None


def test_concurrent_readers_only_see_complete_values():
    settings = TrackingSettings()
    seen = set()
    stop = threading.Event()

    def writer():
        for i in range(2000):
            if i % 3 == 0:
                settings.clear_manual_tracking()
            else:
                settings.set_advertiser_tracking_enabled(i % 2 == 0)
        stop.set()

    thread = threading.Thread(target=writer)
    thread.start()
    while not stop.is_set():
        seen.add(settings.manual_tracking_value())
    thread.join()

    assert seen <= {None, True, False}
