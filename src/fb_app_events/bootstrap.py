"""One-call startup wiring for apps that use the default sender."""

from typing import Any, Callable, Optional

import httpx
import structlog

from fb_app_events.advertiser import get_advertiser_resolver
from fb_app_events.config import SenderSettings
from fb_app_events.events import create_activate_app_event
from fb_app_events.schemas import ExtInfo
from fb_app_events.sender import (
    DEFAULT_GRAPH_API_VERSION,
    DEFAULT_TIMEOUT,
    GRAPH_BASE_URL,
    EventSender,
    initialize_instance,
)
from fb_app_events.tracking import TrackingSettings

log = structlog.get_logger()


def use_facebook_events(
    app_id: str,
    client_token: str,
    platform: str,
    bridge: Any,
    configure_http_client: Optional[Callable[[httpx.AsyncClient], None]] = None,
    auto_log_app_launch: bool = True,
    ext_info: Optional[ExtInfo] = None,
    tracking: Optional[TrackingSettings] = None,
    graph_api_version: str = DEFAULT_GRAPH_API_VERSION,
    base_url: str = GRAPH_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> EventSender:
    """
    Build a sender for ``platform``, bind it as the default instance and return it.

    ``configure_http_client`` receives the ``httpx.AsyncClient`` before first
    use, for custom headers, proxies or timeouts. With ``auto_log_app_launch``
    the ``fb_mobile_activate_app`` event is sent once; this needs no running
    event loop.

    Raises:
        ValidationError: If credentials are empty or the platform is unknown
    """
    resolver = get_advertiser_resolver(platform, bridge, tracking)

    http_client = None
    if configure_http_client is not None:
        http_client = httpx.AsyncClient(timeout=timeout)
        configure_http_client(http_client)

    sender = EventSender(
        app_id,
        client_token,
        resolver,
        http_client=http_client,
        ext_info=ext_info,
        graph_api_version=graph_api_version,
        base_url=base_url,
        timeout=timeout,
    )
    initialize_instance(sender)
    log.info("event.sender.initialized", app_id=app_id, platform=resolver.platform)

    if auto_log_app_launch:
        sender.send_events(create_activate_app_event())
    return sender


def use_facebook_events_from_settings(
    settings: SenderSettings, platform: str, bridge: Any, **kwargs: Any
) -> EventSender:
    return use_facebook_events(
        settings.app_id,
        settings.client_token,
        platform,
        bridge,
        auto_log_app_launch=settings.auto_log_app_launch,
        graph_api_version=settings.graph_api_version,
        base_url=settings.base_url,
        timeout=settings.timeout,
        **kwargs,
    )
