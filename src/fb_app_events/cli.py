"""Command line interface for sending test events."""

import asyncio
import json
from dataclasses import dataclass
from typing import Optional

import click

from fb_app_events.advertiser import AndroidAdvertiserIdResolver
from fb_app_events.config import SenderSettings
from fb_app_events.errors import ValidationError
from fb_app_events.events import create_custom_event, create_purchase_event
from fb_app_events.logging_config import configure_logging
from fb_app_events.schemas import ContentItem, Event
from fb_app_events.sender import EventSender
from fb_app_events.tracking import TrackingSettings

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class ContentItemType(click.ParamType):
    """Parses ``ID`` or ``ID:QUANTITY`` into a ContentItem."""

    name = "item"

    def convert(self, value, param, ctx):
        if isinstance(value, ContentItem):
            return value
        item_id, _, quantity = value.rpartition(":") if ":" in value else (value, "", "1")
        try:
            return ContentItem(id=item_id, quantity=int(quantity))
        except ValueError:
            self.fail(
                f"'{value}' is not a valid item. Expected ID or ID:QUANTITY "
                f"with a non-negative integer quantity.",
                param,
                ctx,
            )


@dataclass
class StaticAdvertisingInfo:
    id: Optional[str]
    is_limit_ad_tracking_enabled: bool


class StaticAdvertisingIdClient:
    """Stands in for Google Play services when sending from a terminal."""

    def __init__(self, advertiser_id: Optional[str], limit_ad_tracking: bool):
        self.info = StaticAdvertisingInfo(advertiser_id, limit_ad_tracking)

    def get_advertising_id_info(self) -> StaticAdvertisingInfo:
        return self.info


def _send(obj: dict, event: Event) -> None:
    settings: SenderSettings = obj["settings"]
    tracking = TrackingSettings()
    if obj["tracking"] is not None:
        tracking.set_advertiser_tracking_enabled(obj["tracking"])
    resolver = AndroidAdvertiserIdResolver(
        StaticAdvertisingIdClient(obj["advertiser_id"], limit_ad_tracking=False),
        tracking,
    )
    try:
        sender = EventSender(
            settings.app_id,
            settings.client_token,
            resolver,
            graph_api_version=settings.graph_api_version,
            base_url=settings.base_url,
            timeout=settings.timeout,
        )
    except ValidationError as e:
        raise click.UsageError(str(e))

    async def run():
        sender.send_events(event)
        await sender.aclose()

    asyncio.run(run())
    click.echo(json.dumps(event.to_custom_event(), indent=2))


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--app-id", envvar="FB_APP_ID", help="Facebook App ID.")
@click.option("--client-token", envvar="FB_CLIENT_TOKEN", help="Facebook Client Token.")
@click.option("--advertiser-id", default=None, help="Advertising id to report.")
@click.option(
    "--tracking/--no-tracking",
    default=None,
    help="Manually set advertiser tracking instead of using the device default.",
)
@click.pass_context
def cli(ctx, app_id, client_token, advertiser_id, tracking):
    """fb-app-events command line interface."""
    configure_logging()
    settings = SenderSettings.from_env()
    if app_id:
        settings.app_id = app_id
    if client_token:
        settings.client_token = client_token
    ctx.obj = {
        "settings": settings,
        "advertiser_id": advertiser_id,
        "tracking": tracking,
    }


@cli.command("send-custom")
@click.argument("event_name")
@click.option("--value", type=float, help="Value to sum.")
@click.option("--currency", help="3-letter currency code.")
@click.option("--content-type", help="Content type, e.g. product.")
@click.option("--item", "items", type=ContentItemType(), multiple=True, help="ID[:QUANTITY]")
@click.pass_obj
def send_custom(obj, event_name, value, currency, content_type, items):
    """Send a single custom event named EVENT_NAME."""
    try:
        event = create_custom_event(
            event_name,
            content_type=content_type,
            items=items,
            value_to_sum=value,
            currency=currency,
        )
    except ValidationError as e:
        raise click.UsageError(str(e))
    _send(obj, event)


@cli.command("send-purchase")
@click.option(
    "--item", "items", type=ContentItemType(), multiple=True, required=True, help="ID[:QUANTITY]"
)
@click.option("--value", type=float, required=True, help="Total purchase value.")
@click.option("--currency", required=True, help="3-letter currency code.")
@click.pass_obj
def send_purchase(obj, items, value, currency):
    """Send a purchase event."""
    try:
        event = create_purchase_event(items, value, currency)
    except ValidationError as e:
        raise click.UsageError(str(e))
    _send(obj, event)


def main():
    """CLI entrypoint."""
    cli()


if __name__ == "__main__":
    main()
