"""Tests for carrier API clients against in-process fake upstreams."""

import base64

import pytest
from aiohttp import web

from tracker.models import LookupStatus
from tracker.tracking.carrier_api import GLSAPI, GLSAuthAPI, YunExpressAPI


YT_RESPONSE = {
    "Success": True,
    "Item": {
        "TrackingDetails": [
            {
                "ProcessDate": "2024-04-05 08:00:00",
                "ProcessContent": "Shipment information received",
                "ProcessLocation": "Shenzhen",
            },
            {
                "ProcessDate": "2024-04-10 12:00:00",
                "ProcessContent": "Delivered to local carrier, GLS no. 12345678901",
                "ProcessLocation": None,
            },
        ]
    },
}

GLS_RESPONSE = {
    "tuStatus": [
        {
            "history": [
                {"date": "2024-04-11", "evtDscr": "In transit", "address": {"city": "Stryków"}},
                {"date": "2024-04-12", "evtDscr": "Delivered", "address": {"city": "Warszawa", "country": "PL"}},
            ]
        }
    ]
}


class TestYunExpressAPI:
    """Tests for YunExpressAPI."""

    @pytest.mark.asyncio
    async def test_lookup_success(self, upstream):
        seen = {}

        async def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = await request.json()
            return web.json_response(YT_RESPONSE)

        async with upstream(web.post("/GetTrackInfo", handler)) as server:
            api = YunExpressAPI("yt-key", "C0001", api_url=str(server.make_url("/GetTrackInfo")))
            result = await api.lookup("YT999")

        assert result.status == LookupStatus.OK
        assert [e.status for e in result.events] == [
            "Shipment information received",
            "Delivered to local carrier, GLS no. 12345678901",
        ]
        assert result.events[1].location == ""
        assert seen["body"] == {"CustomerCode": "C0001", "WayBillNumber": "YT999"}
        assert seen["auth"] == "Basic " + base64.b64encode(b"yt-key").decode()

    @pytest.mark.asyncio
    async def test_not_found_degrades(self, upstream):
        async def handler(request):
            return web.json_response({"Success": False, "Item": None})

        async with upstream(web.post("/GetTrackInfo", handler)) as server:
            api = YunExpressAPI("yt-key", "C0001", api_url=str(server.make_url("/GetTrackInfo")))
            result = await api.lookup("YT000")
            events = await api.get_tracking("YT000")

        assert result.is_degraded
        assert result.reason == "YunExpress tracking not found"
        assert events == []

    @pytest.mark.asyncio
    async def test_http_error_degrades(self, upstream):
        async def handler(request):
            return web.Response(status=500, text="boom")

        async with upstream(web.post("/GetTrackInfo", handler)) as server:
            api = YunExpressAPI("yt-key", "C0001", api_url=str(server.make_url("/GetTrackInfo")))
            result = await api.lookup("YT999")

        assert result.is_degraded
        assert result.reason == "HTTP 500"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("item", [
        {"TrackingDetails": 5},
        {"TrackingDetails": "none yet"},
        {"TrackingDetails": {"ProcessDate": "2024-04-05"}},
    ])
    async def test_malformed_details_degrade(self, upstream, item):
        async def handler(request):
            return web.json_response({"Success": True, "Item": item})

        async with upstream(web.post("/GetTrackInfo", handler)) as server:
            api = YunExpressAPI("yt-key", "C0001", api_url=str(server.make_url("/GetTrackInfo")))
            result = await api.lookup("YT999")
            events = await api.get_tracking("YT999")

        assert result.is_degraded
        assert result.reason.startswith("Malformed YunExpress response")
        assert events == []

    @pytest.mark.asyncio
    async def test_non_dict_item_gives_no_events(self, upstream):
        async def handler(request):
            return web.json_response({"Success": True, "Item": ["unexpected"]})

        async with upstream(web.post("/GetTrackInfo", handler)) as server:
            api = YunExpressAPI("yt-key", "C0001", api_url=str(server.make_url("/GetTrackInfo")))
            events = await api.get_tracking("YT999")

        assert events == []

    @pytest.mark.asyncio
    async def test_created_status_degrades(self, upstream):
        async def handler(request):
            return web.json_response(YT_RESPONSE, status=201)

        async with upstream(web.post("/GetTrackInfo", handler)) as server:
            api = YunExpressAPI("yt-key", "C0001", api_url=str(server.make_url("/GetTrackInfo")))
            result = await api.lookup("YT999")

        assert result.is_degraded
        assert result.reason == "HTTP 201"

    @pytest.mark.asyncio
    async def test_invalid_json_degrades(self, upstream):
        async def handler(request):
            return web.Response(status=200, text="<html>maintenance</html>")

        async with upstream(web.post("/GetTrackInfo", handler)) as server:
            api = YunExpressAPI("yt-key", "C0001", api_url=str(server.make_url("/GetTrackInfo")))
            result = await api.lookup("YT999")

        assert result.is_degraded
        assert result.events == []

    @pytest.mark.asyncio
    async def test_transport_error_degrades(self):
        api = YunExpressAPI("yt-key", "C0001", api_url="http://127.0.0.1:1/GetTrackInfo")

        result = await api.lookup("YT999")

        assert result.is_degraded
        assert await api.get_tracking("YT999") == []


class TestGLSAPI:
    """Tests for the public GLS lookup."""

    @pytest.mark.asyncio
    async def test_lookup_success(self, upstream):
        seen = {}

        async def handler(request):
            seen["match"] = request.query.get("match")
            return web.json_response(GLS_RESPONSE)

        async with upstream(web.get("/rstt001", handler)) as server:
            api = GLSAPI(api_url=str(server.make_url("/rstt001")))
            events = await api.get_tracking("12345678901")

        assert seen["match"] == "12345678901"
        assert [e.location for e in events] == ["Stryków, Poland", "Warszawa, PL"]
        assert all(e.courier == "GLS" for e in events)

    @pytest.mark.asyncio
    async def test_empty_status_degrades(self, upstream):
        async def handler(request):
            return web.json_response({"tuStatus": []})

        async with upstream(web.get("/rstt001", handler)) as server:
            api = GLSAPI(api_url=str(server.make_url("/rstt001")))
            result = await api.lookup("12345678901")

        assert result.is_degraded
        assert result.reason == "GLS tracking not found"

    @pytest.mark.asyncio
    async def test_not_found_status_degrades(self, upstream):
        async def handler(request):
            return web.json_response({"exceptionText": "No data"}, status=404)

        async with upstream(web.get("/rstt001", handler)) as server:
            api = GLSAPI(api_url=str(server.make_url("/rstt001")))
            result = await api.lookup("12345678901")

        assert result.is_degraded
        assert result.reason == "HTTP 404"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"tuStatus": {"a": 1}},
        {"tuStatus": "12345678901"},
        {"tuStatus": [{"history": {"date": "2024-04-12"}}]},
        {"tuStatus": [{"history": 7}]},
    ])
    async def test_malformed_payload_degrades(self, upstream, payload):
        async def handler(request):
            return web.json_response(payload)

        async with upstream(web.get("/rstt001", handler)) as server:
            api = GLSAPI(api_url=str(server.make_url("/rstt001")))
            result = await api.lookup("12345678901")
            events = await api.get_tracking("12345678901")

        assert result.is_degraded
        assert result.reason.startswith("Malformed GLS response")
        assert events == []

    @pytest.mark.asyncio
    async def test_non_dict_address_reads_as_empty(self, upstream):
        async def handler(request):
            return web.json_response({
                "tuStatus": [{"history": [{"date": "2024-04-12", "evtDscr": "Delivered", "address": "Warszawa"}]}]
            })

        async with upstream(web.get("/rstt001", handler)) as server:
            api = GLSAPI(api_url=str(server.make_url("/rstt001")))
            result = await api.lookup("12345678901")

        assert result.status == LookupStatus.OK
        assert result.events[0].location == ", Poland"


class TestGLSAuthAPI:
    """Tests for the authenticated GLS API."""

    @pytest.mark.asyncio
    async def test_lookup_success(self, upstream):
        seen = {}

        async def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = await request.json()
            return web.json_response({
                "events": [
                    {"timestamp": "2024-04-12T09:00:00Z", "description": "Delivered", "location": "Warszawa"},
                ]
            })

        async with upstream(web.post("/tracking", handler)) as server:
            api = GLSAuthAPI("gls-secret", api_url=str(server.make_url("/tracking")))
            result = await api.lookup("12345678901")

        assert result.status == LookupStatus.OK
        assert seen["auth"] == "Bearer gls-secret"
        assert seen["body"] == {"trackingNumber": "12345678901"}
        assert result.events[0].location == "Warszawa"

    @pytest.mark.asyncio
    async def test_missing_events_degrades(self, upstream):
        async def handler(request):
            return web.json_response({"error": "unknown parcel"})

        async with upstream(web.post("/tracking", handler)) as server:
            api = GLSAuthAPI("gls-secret", api_url=str(server.make_url("/tracking")))
            result = await api.lookup("12345678901")

        assert result.is_degraded

    @pytest.mark.asyncio
    @pytest.mark.parametrize("events", [{"timestamp": "2024-04-12"}, "none", 3])
    async def test_non_list_events_degrade(self, upstream, events):
        async def handler(request):
            return web.json_response({"events": events})

        async with upstream(web.post("/tracking", handler)) as server:
            api = GLSAuthAPI("gls-secret", api_url=str(server.make_url("/tracking")))
            result = await api.lookup("12345678901")

        assert result.is_degraded
        assert result.events == []
