"""Sender configuration read from the environment."""

import os
from typing import Optional

from pydantic import BaseModel

from fb_app_events.sender import DEFAULT_GRAPH_API_VERSION, DEFAULT_TIMEOUT, GRAPH_BASE_URL


class SenderSettings(BaseModel):
    """Everything needed to build an EventSender apart from the platform bridge."""

    app_id: str = ""
    client_token: str = ""
    graph_api_version: str = DEFAULT_GRAPH_API_VERSION
    base_url: str = GRAPH_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    auto_log_app_launch: bool = True

    @classmethod
    def from_env(cls, prefix: str = "FB_") -> "SenderSettings":
        def env(name: str, default: Optional[str] = None) -> Optional[str]:
            return os.getenv(f"{prefix}{name}", default)

        return cls(
            app_id=env("APP_ID", ""),
            client_token=env("CLIENT_TOKEN", ""),
            graph_api_version=env("GRAPH_API_VERSION", DEFAULT_GRAPH_API_VERSION),
            base_url=env("GRAPH_BASE_URL", GRAPH_BASE_URL),
            timeout=float(env("HTTP_TIMEOUT", str(DEFAULT_TIMEOUT))),
            auto_log_app_launch=env("AUTO_LOG_APP_LAUNCH", "true").lower()
            in ("true", "1", "t"),
        )
