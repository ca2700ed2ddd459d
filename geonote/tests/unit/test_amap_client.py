"""Unit tests for the AMap (China provider) wire protocol and normalization."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from geonote.location.errors import ConfigurationError, LocationError, NetworkError, ProviderError
from geonote.location.providers.amap_client import AmapClient


def _client(transport) -> AmapClient:
    return AmapClient("amap-key", base_url="https://amap.test", transport=transport)


_POI = {
    "id": "B000A7BD6J",
    "name": "天安门广场",
    "address": "西长安街",
    "location": "116.397470,39.908823",
    "pname": "北京市",
    "cityname": "北京市",
    "adname": "东城区",
    "type": "风景名胜",
    "distance": "120.7",
}


def test_amap_requires_api_key() -> None:
    with pytest.raises(ConfigurationError):
        AmapClient("")
    with pytest.raises(ConfigurationError):
        AmapClient(None)


def test_search_location_builds_request_and_normalizes_pois(json_transport) -> None:
    transport = json_transport({"status": "1", "info": "OK", "pois": [_POI, {"name": "broken"}]})

    results = asyncio.run(_client(transport).search_location("天安门", city="北京", page_size=5))

    request = transport.requests[0]
    assert request.url.path == "/v5/place/text"
    assert request.url.params["key"] == "amap-key"
    assert request.url.params["keywords"] == "天安门"
    assert request.url.params["city"] == "北京"
    assert request.url.params["pageSize"] == "5"
    assert request.url.params["extensions"] == "all"

    assert len(results) == 1
    item = results[0]
    assert item.id == "B000A7BD6J"
    assert item.latitude == pytest.approx(39.908823)
    assert item.longitude == pytest.approx(116.397470)
    assert item.formatted_address == "北京市北京市东城区西长安街"
    assert item.distance == "120 米"
    assert item.poi_name == "天安门广场"
    assert item.district == "东城区"


def test_search_nearby_sends_lon_lat_order(json_transport) -> None:
    transport = json_transport({"status": "1", "pois": [_POI]})

    asyncio.run(_client(transport).search_nearby(39.9, 116.4, keywords="咖啡", radius=2000, page_size=3))

    params = transport.requests[0].url.params
    assert transport.requests[0].url.path == "/v5/place/around"
    assert params["location"] == "116.4,39.9"
    assert params["radius"] == "2000"
    assert params["keywords"] == "咖啡"


def test_non_success_status_raises_provider_error_with_info(json_transport) -> None:
    transport = json_transport({"status": "0", "info": "INVALID_USER_KEY", "infocode": "10001"})

    with pytest.raises(ProviderError) as exc_info:
        asyncio.run(_client(transport).search_location("x"))

    assert exc_info.value.message == "INVALID_USER_KEY"
    assert exc_info.value.provider == "amap"


def test_timeout_raises_network_error(failing_transport) -> None:
    with pytest.raises(NetworkError):
        asyncio.run(_client(failing_transport).search_location("x"))


def test_http_error_status_raises_provider_error(json_transport) -> None:
    with pytest.raises(ProviderError):
        asyncio.run(_client(json_transport({"message": "boom"}, 500)).search_location("x"))


def _regeo(aois=None, pois=None, city="北京市") -> dict:
    return {
        "status": "1",
        "regeocode": {
            "formatted_address": "北京市东城区东华门街道天安门",
            "addressComponent": {
                "province": "北京市",
                "city": city,
                "district": "东城区",
                "township": "东华门街道",
                "streetNumber": {"name": "西长安街"},
            },
            "aois": aois or [],
            "pois": pois or [],
        },
    }


def test_reverse_geocode_prefers_aoi(json_transport) -> None:
    transport = json_transport(
        _regeo(aois=[{"name": "天安门广场"}], pois=[{"name": "人民英雄纪念碑", "distance": "35"}])
    )

    result = asyncio.run(_client(transport).reverse_geocode(39.9087, 116.3975))

    params = transport.requests[0].url.params
    assert transport.requests[0].url.path == "/v3/geocode/regeo"
    assert params["location"] == "116.3975,39.9087"
    assert params["radius"] == "1000"
    assert params["poitype"] == "000000"
    assert result.poi_name == "天安门广场"
    assert result.address == "东城区天安门广场东华门街道西长安街"
    assert result.province == "北京市"
    assert result.street == "东华门街道"
    assert result.distance == "35 米"


def test_reverse_geocode_falls_back_to_nearest_poi_with_distance(json_transport) -> None:
    transport = json_transport(_regeo(pois=[{"name": "人民英雄纪念碑", "distance": "35"}]))

    result = asyncio.run(_client(transport).reverse_geocode(39.9, 116.4))

    assert result.poi_name == "人民英雄纪念碑 附近 35 米"
    assert result.address == "东城区人民英雄纪念碑西长安街"


def test_reverse_geocode_bare_admin_components_and_list_city(json_transport) -> None:
    payload = _regeo(city=[])
    payload["regeocode"]["addressComponent"]["township"] = []
    transport = json_transport(payload)

    result = asyncio.run(_client(transport).reverse_geocode(39.9, 116.4))

    assert result.poi_name is None
    assert result.address == "东城区西长安街"
    assert result.city == ""
    assert result.street == ""
    assert result.distance is None


def test_reverse_geocode_without_regeocode_is_provider_error(json_transport) -> None:
    with pytest.raises(ProviderError):
        asyncio.run(_client(json_transport({"status": "1"})).reverse_geocode(39.9, 116.4))


def test_geocode_parses_geocodes(json_transport) -> None:
    transport = json_transport(
        {
            "status": "1",
            "geocodes": [
                {
                    "formatted_address": "北京市朝阳区阜通东大街6号",
                    "province": "北京市",
                    "city": "北京市",
                    "district": "朝阳区",
                    "street": [],
                    "location": "116.480881,39.989410",
                    "level": "门牌号",
                }
            ],
        }
    )

    results = asyncio.run(_client(transport).geocode("阜通东大街6号", city="北京"))

    assert transport.requests[0].url.path == "/v3/geocode/geo"
    assert results[0].latitude == pytest.approx(39.989410)
    assert results[0].type == "门牌号"
    assert results[0].street is None
    assert results[0].id == "amap_geo_0"


def test_undecodable_body_raises_network_error() -> None:
    transport = httpx.MockTransport(
        lambda _req: httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not-gzip")
    )

    with pytest.raises(LocationError) as exc_info:
        asyncio.run(_client(transport).search_location("x"))

    assert isinstance(exc_info.value, NetworkError)
    assert exc_info.value.provider == "amap"


def test_out_of_range_coordinates_are_skipped(json_transport) -> None:
    transport = json_transport(
        {"status": "1", "pois": [{**_POI, "id": "bad", "location": "200.0,39.9"}, _POI]}
    )

    results = asyncio.run(_client(transport).search_location("天安门"))

    assert [item.id for item in results] == ["B000A7BD6J"]


def test_input_tips_drops_tips_without_location(json_transport) -> None:
    transport = json_transport(
        {
            "status": "1",
            "tips": [
                {
                    "id": "B000A83M61",
                    "name": "天安门东(地铁站)",
                    "district": "北京市东城区",
                    "address": "1号线八通线",
                    "location": "116.401216,39.907795",
                },
                {"id": [], "name": "天安门广场附近的餐厅", "district": [], "address": [], "location": []},
                {
                    "id": [],
                    "name": "天安门城楼",
                    "district": "北京市东城区",
                    "address": [],
                    "location": "116.397499,39.908722",
                },
            ],
        }
    )

    tips = asyncio.run(_client(transport).input_tips("天安门", city="北京", limit=5))

    params = transport.requests[0].url.params
    assert transport.requests[0].url.path == "/v3/assistant/inputtips"
    assert params["keywords"] == "天安门"
    assert params["city"] == "北京"
    assert params["citylimit"] == "true"
    assert [tip.name for tip in tips] == ["天安门东(地铁站)", "天安门城楼"]
    assert tips[0].formatted_address == "北京市东城区1号线八通线"
    assert tips[0].district == "北京市东城区"
    assert tips[1].id == "amap_tip_2"
    assert tips[1].address == ""


def test_input_tips_honours_limit_without_city(json_transport) -> None:
    tip = {"id": "t", "name": "咖啡", "district": "", "address": "", "location": "116.4,39.9"}
    transport = json_transport({"status": "1", "tips": [tip, tip, tip]})

    tips = asyncio.run(_client(transport).input_tips("咖啡", limit=2))

    assert len(tips) == 2
    assert "citylimit" not in transport.requests[0].url.params
