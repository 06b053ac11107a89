"""
Meta Conversions API client.

One POST per event, no retries: a failed delivery is reported to the caller,
who decides whether to send it again.
"""

import httpx
import structlog

from leadbridge.config import Settings
from leadbridge.errors import ConfigurationError, DispatchError
from leadbridge.schemas.conversion import ConversionEvent, DispatchAck

logger = structlog.get_logger(__name__)


def _response_body(response: httpx.Response):
    """Decoded JSON body, falling back to raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text


class EventDispatcher:
    """
    Sends conversion events to ``/{pixel_id}/events``.

    The access token travels as a query parameter, as the Graph API expects.
    An injected ``client`` is used as-is (shared pool, tests); otherwise a
    client with the configured timeout is opened per call.
    """

    def __init__(
        self,
        pixel_id: str | None,
        access_token: str | None,
        *,
        api_version: str = "v24.0",
        base_url: str = "https://graph.facebook.com",
        timeout: float = 10.0,
        test_event_code: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._pixel_id = pixel_id
        self._access_token = access_token
        self._api_version = api_version
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._test_event_code = test_event_code
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient | None = None) -> "EventDispatcher":
        return cls(
            settings.pixel_id,
            settings.access_token,
            api_version=settings.graph_api_version,
            base_url=settings.graph_api_base_url,
            timeout=settings.dispatch_timeout_seconds,
            test_event_code=settings.test_event_code,
            client=client,
        )

    @property
    def events_url(self) -> str:
        return f"{self._base_url}/{self._api_version}/{self._pixel_id}/events"

    async def dispatch(self, event: ConversionEvent) -> DispatchAck:
        """
        Deliver a single event.

        Raises ConfigurationError before any network I/O when the pixel id or
        access token is missing, and DispatchError on timeout, transport
        failure or a non-2xx answer (with the upstream body attached).
        """
        if not self._pixel_id or not self._access_token:
            raise ConfigurationError("PIXEL_ID and FB_ACCESS_TOKEN must be set")

        payload: dict = {"data": [event.model_dump()]}
        if self._test_event_code:
            payload["test_event_code"] = self._test_event_code

        logger.info("dispatch.sending", event_name=event.event_name)
        try:
            if self._client is not None:
                response = await self._post(self._client, payload)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._post(client, payload)
        except httpx.TimeoutException as e:
            raise DispatchError(f"Conversions API timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise DispatchError(f"Conversions API request failed: {e}") from e

        body = _response_body(response)
        if response.is_error:
            raise DispatchError(
                f"Conversions API rejected the event ({response.status_code})",
                status_code=response.status_code,
                body=body,
            )

        if not isinstance(body, dict):
            body = {}
        ack = DispatchAck(
            events_received=body.get("events_received"),
            fbtrace_id=body.get("fbtrace_id"),
            body=body,
        )
        logger.info(
            "dispatch.sent",
            event_name=event.event_name,
            events_received=ack.events_received,
            fbtrace_id=ack.fbtrace_id,
        )
        return ack

    async def _post(self, client: httpx.AsyncClient, payload: dict) -> httpx.Response:
        return await client.post(
            self.events_url,
            params={"access_token": self._access_token},
            json=payload,
            timeout=self._timeout,
        )
