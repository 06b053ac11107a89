"""Unit tests for the Conversions API client, against httpx.MockTransport."""

import httpx
import pytest

from leadbridge.errors import ConfigurationError, DispatchError
from leadbridge.schemas.conversion import ConversionEvent
from leadbridge.services.dispatcher import EventDispatcher

PIXEL_ID = "PIXEL123"
ACCESS_TOKEN = "test-token"


@pytest.fixture
def event() -> ConversionEvent:
    return ConversionEvent(
        event_name="Atendeu",
        event_time=1_700_000_000,
        user_data={"em": ["abc"], "lead_id": "L1"},
        custom_data={"event_source": "crm"},
    )


async def test_posts_singleton_batch_to_pixel_events(dispatcher, capi, event):
    ack = await dispatcher.dispatch(event)

    assert len(capi.requests) == 1
    request = capi.requests[0]
    assert request.method == "POST"
    assert request.url.path == f"/v24.0/{PIXEL_ID}/events"
    assert request.url.params["access_token"] == ACCESS_TOKEN
    assert capi.payloads[0] == {"data": [event.model_dump()]}
    assert ack.events_received == 1
    assert ack.fbtrace_id == "trace-abc"


async def test_test_event_code_is_sent_when_configured(capi, event):
    async with httpx.AsyncClient(transport=httpx.MockTransport(capi)) as http:
        dispatcher = EventDispatcher(PIXEL_ID, ACCESS_TOKEN, test_event_code="TEST123", client=http)
        await dispatcher.dispatch(event)

    assert capi.payloads[0]["test_event_code"] == "TEST123"


@pytest.mark.parametrize(("pixel_id", "token"), [(None, ACCESS_TOKEN), (PIXEL_ID, None), ("", "")])
async def test_missing_credentials_fail_before_network(capi, event, pixel_id, token):
    async with httpx.AsyncClient(transport=httpx.MockTransport(capi)) as http:
        dispatcher = EventDispatcher(pixel_id, token, client=http)
        with pytest.raises(ConfigurationError):
            await dispatcher.dispatch(event)

    assert capi.requests == []


async def test_rejection_carries_upstream_body(dispatcher, capi, event):
    capi.status_code = 400
    capi.body = {"error": {"message": "Invalid parameter", "code": 100}}

    with pytest.raises(DispatchError) as exc_info:
        await dispatcher.dispatch(event)

    assert exc_info.value.status_code == 400
    assert exc_info.value.body == {"error": {"message": "Invalid parameter", "code": 100}}


async def test_non_json_error_body_is_kept_as_text(dispatcher, capi, event):
    capi.status_code = 502
    capi.body = "Bad Gateway"

    with pytest.raises(DispatchError) as exc_info:
        await dispatcher.dispatch(event)

    assert exc_info.value.body == "Bad Gateway"


async def test_timeout_is_a_dispatch_error(dispatcher, capi, event):
    capi.exc = httpx.ReadTimeout("timed out")

    with pytest.raises(DispatchError, match="timed out"):
        await dispatcher.dispatch(event)

    assert len(capi.requests) == 1


async def test_transport_failure_is_a_dispatch_error(dispatcher, capi, event):
    capi.exc = httpx.ConnectError("connection refused")

    with pytest.raises(DispatchError):
        await dispatcher.dispatch(event)


def test_from_settings_uses_configured_endpoint():
    from leadbridge.config import Settings

    settings = Settings(
        _env_file=None,
        pixel_id="999",
        graph_api_version="v99.0",
        graph_api_base_url="https://graph.example.com/",
    )

    dispatcher = EventDispatcher.from_settings(settings)

    assert dispatcher.events_url == "https://graph.example.com/v99.0/999/events"
