"""Pydantic models for app events and advertiser identity."""

import json
import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CURRENCY_PATTERN = re.compile(r"^[A-Za-z]{3}$")

# Keys written from the Event fields themselves; parameters may not set them.
RESERVED_PARAMETERS = frozenset(
    {
        "_eventName",
        "_eventID",
        "_logTime",
        "_valueToSum",
        "fb_currency",
        "fb_content_type",
        "fb_content",
    }
)


class ContentItem(BaseModel):
    """A single line item (product, media asset) referenced by an event."""

    model_config = ConfigDict(frozen=True)

    id: str
    quantity: int = Field(1, ge=0)

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content item id must not be empty")
        return value


class Event(BaseModel):
    """A single analytics event. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    event_name: str
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    content_items: Tuple[ContentItem, ...] = ()
    content_type: Optional[str] = None
    value_to_sum: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = None
    parameters: Dict[str, str] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("event_name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("event name must not be empty")
        return value

    @field_validator("parameters")
    @classmethod
    def _no_reserved_keys(cls, value: Dict[str, str]) -> Dict[str, str]:
        clashes = sorted(RESERVED_PARAMETERS.intersection(value))
        if clashes:
            raise ValueError(f"parameters may not override {clashes}")
        return value

    @field_validator("currency")
    @classmethod
    def _currency_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if not CURRENCY_PATTERN.match(value):
            raise ValueError(f"'{value}' is not a 3-letter currency code")
        return value.upper()

    def to_custom_event(self) -> Dict[str, Any]:
        """Serialize into one entry of the ``custom_events`` array."""
        payload: Dict[str, Any] = dict(self.parameters)
        payload["_eventName"] = self.event_name
        payload["_eventID"] = self.event_id
        payload["_logTime"] = int(self.timestamp.timestamp())
        if self.value_to_sum is not None:
            payload["_valueToSum"] = float(self.value_to_sum)
        if self.currency:
            payload["fb_currency"] = self.currency
        if self.content_type:
            payload["fb_content_type"] = self.content_type
        if self.content_items:
            payload["fb_content"] = json.dumps(
                [item.model_dump() for item in self.content_items]
            )
        return payload


class AdvertiserIdentity(BaseModel):
    """The advertiser id and tracking-consent flag attached to a request.

    The id is dropped whenever tracking is disabled, whatever the caller
    passed in.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    tracking_enabled: bool = False

    @model_validator(mode="before")
    @classmethod
    def _hide_id_when_disabled(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("tracking_enabled", False):
            data = {**data, "id": None}
        return data

    @classmethod
    def disabled(cls) -> "AdvertiserIdentity":
        return cls(tracking_enabled=False)


class ExtInfo(BaseModel):
    """Device and app metadata sent as the ``extinfo`` array."""

    platform_version: str = "a2"
    package_name: str = ""
    short_version: str = ""
    long_version: str = ""
    os_version: str = ""
    device_model: str = ""
    locale: str = "en_US"
    timezone_abbr: str = ""
    carrier: str = ""
    screen_width: int = 0
    screen_height: int = 0
    screen_density: str = ""
    cpu_cores: int = 0
    total_disk_gb: int = 0
    free_disk_gb: int = 0
    device_timezone: str = ""

    def to_param(self) -> str:
        """JSON-encode the fields in the order the Graph API expects."""
        values: List[Any] = [getattr(self, name) for name in type(self).model_fields]
        return json.dumps(values)
