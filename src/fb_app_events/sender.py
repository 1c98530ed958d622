"""Fire-and-forget delivery of app events to the Graph API."""

import asyncio
import concurrent.futures
import json
import threading
from typing import Dict, Iterable, List, Optional, Set, Union

import httpx
import structlog

from fb_app_events.advertiser.base import AdvertiserIdResolver
from fb_app_events.errors import NotInitializedError, TransportError, ValidationError
from fb_app_events.schemas import AdvertiserIdentity, Event, ExtInfo

log = structlog.get_logger()

GRAPH_BASE_URL = "https://graph.facebook.com"
DEFAULT_GRAPH_API_VERSION = "v19.0"
DEFAULT_TIMEOUT = 10.0


class EventSender:
    """Sends batches of events to ``/{app_id}/activities`` without blocking the caller.

    Each ``send_events`` call resolves the advertiser identity, builds one
    request for the whole batch and posts it from a detached task. Transport
    errors and non-2xx responses are logged and dropped; nothing is retried.
    """

    def __init__(
        self,
        app_id: str,
        client_token: str,
        advertiser_resolver: AdvertiserIdResolver,
        http_client: Optional[httpx.AsyncClient] = None,
        ext_info: Optional[ExtInfo] = None,
        graph_api_version: str = DEFAULT_GRAPH_API_VERSION,
        base_url: str = GRAPH_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if not app_id or not app_id.strip():
            raise ValidationError("Facebook App ID cannot be empty.")
        if not client_token or not client_token.strip():
            raise ValidationError("Facebook Client Token cannot be empty.")

        self.app_id = app_id
        self._client_token = client_token
        self.advertiser_resolver = advertiser_resolver
        self.ext_info = ext_info or ExtInfo(
            platform_version=advertiser_resolver.extinfo_version
        )
        self.endpoint = f"{base_url.rstrip('/')}/{graph_api_version}/{app_id}/activities"
        self.timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None
        self._pending: Set[asyncio.Task] = set()
        self._futures: Set[concurrent.futures.Future] = set()
        self._futures_lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_thread: Optional[threading.Thread] = None
        self._loop_lock = threading.Lock()

    @property
    def access_token(self) -> str:
        return f"{self.app_id}|{self._client_token}"

    def build_payload(
        self, identity: AdvertiserIdentity, events: Iterable[Event]
    ) -> Dict[str, str]:
        """Assemble the form fields for one batch, keeping the events in order."""
        payload = {
            "event": "CUSTOM_APP_EVENTS",
            "access_token": self.access_token,
            "advertiser_tracking_enabled": "1" if identity.tracking_enabled else "0",
            "application_tracking_enabled": "1",
            "extinfo": self.ext_info.to_param(),
            "custom_events": json.dumps([event.to_custom_event() for event in events]),
        }
        if identity.id:
            payload["advertiser_id"] = identity.id
        return payload

    def send_events(
        self, *events: Event
    ) -> Optional[Union[asyncio.Future, concurrent.futures.Future]]:
        """
        Dispatch ``events`` as a single request and return immediately.

        Inside a running event loop the request runs as a detached task, which
        is returned so shutdown code can wait on it. Outside a loop the batch
        goes to a background loop owned by this sender and a
        ``concurrent.futures.Future`` is returned. Once that loop exists every
        later batch runs on it too, so the HTTP client only ever sees one loop.
        The returned future never raises.
        """
        if not events:
            log.debug("event.send.empty_batch")
            return None

        batch = tuple(events)
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is None or self._loop is not None:
            future = asyncio.run_coroutine_threadsafe(
                self._dispatch(batch), self._background_loop()
            )
            with self._futures_lock:
                self._futures.add(future)
            future.add_done_callback(self._forget_future)
            return future if running is None else asyncio.wrap_future(future)

        task = running.create_task(self._dispatch(batch), name="fb-app-events-send")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def flush(self) -> None:
        """Wait for every in-flight batch to finish."""
        while self._pending or self._background_futures():
            waiters = list(self._pending)
            waiters.extend(asyncio.wrap_future(f) for f in self._background_futures())
            await asyncio.gather(*waiters, return_exceptions=True)

    def join(self, timeout: Optional[float] = None) -> bool:
        """Block until batches sent from outside an event loop finish.

        Returns False if ``timeout`` expired first.
        """
        _, not_done = concurrent.futures.wait(self._background_futures(), timeout=timeout)
        return not not_done

    async def aclose(self) -> None:
        await self.flush()
        if self._loop is not None:
            closing = asyncio.run_coroutine_threadsafe(self._close_client(), self._loop)
            await asyncio.wrap_future(closing)
            await asyncio.to_thread(self._stop_background_loop)
        else:
            await self._close_client()

    def close(self) -> None:
        """Synchronous counterpart of ``aclose`` for senders used without a loop."""
        self.join()
        if self._loop is not None:
            asyncio.run_coroutine_threadsafe(self._close_client(), self._loop).result()
            self._stop_background_loop()

    def _background_loop(self) -> asyncio.AbstractEventLoop:
        with self._loop_lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="fb-app-events-send", daemon=True
                )
                thread.start()
                self._loop, self._loop_thread = loop, thread
            return self._loop

    def _stop_background_loop(self) -> None:
        with self._loop_lock:
            loop, thread = self._loop, self._loop_thread
            self._loop = self._loop_thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join()
        loop.close()

    def _background_futures(self) -> List[concurrent.futures.Future]:
        with self._futures_lock:
            return list(self._futures)

    def _forget_future(self, future: concurrent.futures.Future) -> None:
        with self._futures_lock:
            self._futures.discard(future)

    async def _close_client(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def _dispatch(self, events: tuple) -> None:
        log_ctx = {
            "app_id": self.app_id,
            "count": len(events),
            "event_names": [event.event_name for event in events],
        }
        try:
            identity = await self.advertiser_resolver.resolve_identity()
            payload = self.build_payload(identity, events)
            await self._post(self._client(), payload)
        except TransportError as e:
            log.warning(
                "event.send.failed",
                error=str(e),
                status_code=e.status_code,
                **log_ctx,
            )
            return
        except Exception as e:
            log.error("event.send.error", error=str(e), exc_info=True, **log_ctx)
            return
        log.info("event.send.succeeded", **log_ctx)

    async def _post(self, client: httpx.AsyncClient, payload: Dict[str, str]) -> httpx.Response:
        try:
            response = await client.post(self.endpoint, data=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {self.endpoint} failed: {e!r}") from e
        if not response.is_success:
            raise TransportError(
                f"Graph API returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response


# -------------------------
# Process-wide default sender
# -------------------------
_instance: Optional[EventSender] = None
_instance_lock = threading.Lock()


def initialize_instance(sender: EventSender) -> EventSender:
    """Bind the default sender. A later call replaces an earlier one."""
    global _instance
    with _instance_lock:
        if _instance is not None and _instance is not sender:
            log.info("event.sender.rebound", app_id=sender.app_id)
        _instance = sender
    return sender


def get_instance() -> EventSender:
    with _instance_lock:
        sender = _instance
    if sender is None:
        raise NotInitializedError(
            "No EventSender is bound. Call initialize_instance() or "
            "use_facebook_events() first."
        )
    return sender


def reset_instance() -> None:
    global _instance
    with _instance_lock:
        _instance = None


def send_events(*events: Event) -> Optional[Union[asyncio.Future, concurrent.futures.Future]]:
    """Send through the default sender.

    Raises:
        NotInitializedError: If no sender has been bound
    """
    return get_instance().send_events(*events)
