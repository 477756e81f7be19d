import asyncio
import copy

import httpx
import pytest

from conftest import LONG_DESCRIPTION, NEWS_PAYLOAD, WEATHER_PAYLOAD
from toolrelay.config.schema import AppConfig, HttpConfig, NewsConfig, WeatherConfig
from toolrelay.config.secrets import MissingCredentialError, Secrets
from toolrelay.services.api_models import WeatherResponse
from toolrelay.services.http_client import HttpClientService
from toolrelay.tools.builtin.news import SearchNewsTool, TopHeadlinesTool, format_published_at
from toolrelay.tools.builtin.weather import GetWeatherTool, weather_advice
from toolrelay.tools.catalog import build_registry
from toolrelay.tools.errors import (
    InvalidEnumValueError,
    ToolTimeoutError,
    UpstreamFailureError,
)
from toolrelay.tools.registry import ToolRegistry


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it served."""

    def __init__(self, handler) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def registry_with(handler, config: AppConfig | None = None) -> tuple[ToolRegistry, RecordingTransport]:
    transport = RecordingTransport(handler)
    http = HttpClientService(HttpConfig(), transport=transport)
    secrets = Secrets(openweather_api_key="weather-key", news_api_key="news-key")
    return build_registry(config or AppConfig(), secrets, http), transport


def json_handler(payload, status_code: int = 200):
    return lambda request: httpx.Response(status_code, json=payload)


class TestWeather:
    @pytest.mark.asyncio
    async def test_get_weather(self):
        registry, transport = registry_with(json_handler(WEATHER_PAYLOAD))
        result = await registry.invoke("get_weather", {"city": "Tokyo"})

        request = transport.requests[0]
        assert request.url.path == "/data/2.5/weather"
        assert request.url.params["q"] == "Tokyo"
        assert request.url.params["appid"] == "weather-key"
        assert request.url.params["units"] == "metric"

        assert result.raw.weather.city_name == "Tokyo"
        assert result.raw.advice == []
        assert "[Current weather in Tokyo, JP]" in result.display
        assert "Temperature: 26°C (feels like 28°C)" in result.display
        assert "Cloudiness: 75%" in result.display

    @pytest.mark.asyncio
    async def test_get_weather_with_advice(self):
        registry, _ = registry_with(json_handler(WEATHER_PAYLOAD))
        result = await registry.invoke("get_weather_with_advice", {"city": "Tokyo"})
        assert result.raw.advice == [
            "It is a warm day. It should be comfortable.",
            "Don't forget your umbrella.",
            "Humidity is high. It may feel muggy.",
        ]
        assert "Advice:" in result.display

    def test_advice_for_cold_snow(self):
        payload = copy.deepcopy(WEATHER_PAYLOAD)
        payload["main"].update(temp=-2.0, humidity=30)
        payload["weather"][0]["main"] = "Snow"
        advice = weather_advice(WeatherResponse.from_dict(payload))
        assert advice == [
            "It is quite cold. Dress warmly before heading out.",
            "Watch your step and avoid slippery places.",
            "The air is dry. Remember to stay hydrated.",
        ]

    @pytest.mark.asyncio
    async def test_optional_wind_and_clouds(self):
        payload = copy.deepcopy(WEATHER_PAYLOAD)
        del payload["wind"]
        del payload["clouds"]
        registry, _ = registry_with(json_handler(payload))
        result = await registry.invoke("get_weather", {"city": "Tokyo"})
        assert "Wind speed: 0.0m/s" in result.display
        assert "Cloudiness" not in result.display

    @pytest.mark.asyncio
    async def test_upstream_error_status(self):
        registry, _ = registry_with(json_handler({"cod": "404", "message": "city not found"}, 404))
        with pytest.raises(UpstreamFailureError) as exc:
            await registry.invoke("get_weather", {"city": "Atlantis"})
        assert exc.value.status_code == 404
        assert exc.value.tool == "get_weather"

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        registry, _ = registry_with(json_handler({"name": "Tokyo"}))
        with pytest.raises(UpstreamFailureError) as exc:
            await registry.invoke("get_weather", {"city": "Tokyo"})
        assert "missing 'main'" in exc.value.upstream_message

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        registry, _ = registry_with(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(UpstreamFailureError) as exc:
            await registry.invoke("get_weather", {"city": "Tokyo"})
        assert exc.value.status_code == 200

    @pytest.mark.asyncio
    async def test_timeout_is_distinct_from_upstream_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        registry, _ = registry_with(handler)
        with pytest.raises(ToolTimeoutError) as exc:
            await registry.invoke("get_weather", {"city": "Tokyo"})
        assert exc.value.kind == "timeout"
        assert not isinstance(exc.value, UpstreamFailureError)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        registry, _ = registry_with(handler)
        with pytest.raises(UpstreamFailureError) as exc:
            await registry.invoke("get_weather", {"city": "Tokyo"})
        assert exc.value.status_code is None

    @pytest.mark.asyncio
    async def test_call_tool_renders_upstream_failure(self):
        registry, _ = registry_with(json_handler({}, 500))
        result = await registry.call_tool("get_weather", {"city": "Tokyo"})
        assert result.startswith("Error: Upstream request for tool 'get_weather' failed")

    def test_missing_key_fails_at_construction(self, http):
        with pytest.raises(MissingCredentialError):
            GetWeatherTool(http, WeatherConfig(), "")


class TestNews:
    @pytest.mark.asyncio
    async def test_search_news(self):
        registry, transport = registry_with(json_handler(NEWS_PAYLOAD))
        result = await registry.invoke("search_news", {"query": "python", "limit": 2})

        request = transport.requests[0]
        assert request.url.path == "/v2/everything"
        assert request.url.params["q"] == "python"
        assert request.url.params["pageSize"] == "2"
        assert request.url.params["sortBy"] == "publishedAt"
        assert request.headers["X-Api-Key"] == "news-key"

        display = result.display
        assert "Articles: 2" in display
        assert "1. First headline" in display
        assert "Source: Example Times" in display
        assert "Published: 2024-05-01 09:30" in display
        assert f"Summary: {LONG_DESCRIPTION[:97]}..." in display
        assert "Published: not a date" in display
        assert "(10 more articles available)" in display

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit, expected", [(0, "1"), (1000, "20"), ("3", "3")])
    async def test_limit_is_clamped(self, limit, expected):
        registry, transport = registry_with(json_handler(NEWS_PAYLOAD))
        await registry.invoke("search_news", {"query": "python", "limit": limit})
        assert transport.requests[0].url.params["pageSize"] == expected

    @pytest.mark.asyncio
    async def test_only_limit_articles_are_shown(self):
        registry, _ = registry_with(json_handler(NEWS_PAYLOAD))
        result = await registry.invoke("search_news", {"query": "python", "limit": 1})
        assert "Articles: 1" in result.display
        assert "Second headline" not in result.display
        assert "(11 more articles available)" in result.display

    @pytest.mark.asyncio
    async def test_empty_result(self):
        registry, _ = registry_with(json_handler({"status": "ok", "totalResults": 0, "articles": []}))
        result = await registry.invoke("search_news", {"query": "nothing"})
        assert result.display == "No matching news found."

    @pytest.mark.asyncio
    async def test_top_headlines_defaults(self):
        config = AppConfig(news=NewsConfig(default_country="jp"))
        registry, transport = registry_with(json_handler(NEWS_PAYLOAD), config)
        await registry.invoke("get_top_headlines", {})

        params = transport.requests[0].url.params
        assert transport.requests[0].url.path == "/v2/top-headlines"
        assert params["country"] == "jp"
        assert params["pageSize"] == "5"
        assert "category" not in params

    @pytest.mark.asyncio
    async def test_top_headlines_category_case_insensitive(self):
        registry, transport = registry_with(json_handler(NEWS_PAYLOAD))
        await registry.invoke("get_top_headlines", {"country": "US", "category": "Technology"})
        params = transport.requests[0].url.params
        assert params["category"] == "technology"
        assert params["country"] == "us"

    @pytest.mark.asyncio
    async def test_top_headlines_unknown_category(self):
        registry, transport = registry_with(json_handler(NEWS_PAYLOAD))
        with pytest.raises(InvalidEnumValueError) as exc:
            await registry.invoke("get_top_headlines", {"category": "gossip"})
        assert exc.value.param == "category"
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_article_without_title_is_malformed(self):
        payload = copy.deepcopy(NEWS_PAYLOAD)
        del payload["articles"][0]["title"]
        registry, _ = registry_with(json_handler(payload))
        with pytest.raises(UpstreamFailureError):
            await registry.invoke("search_news", {"query": "python"})

    def test_format_published_at(self):
        assert format_published_at("2024-01-15T10:30:00Z") == "2024-01-15 10:30"
        assert format_published_at("yesterday") == "yesterday"

    def test_missing_key_fails_at_construction(self, http):
        with pytest.raises(MissingCredentialError):
            SearchNewsTool(http, NewsConfig(), "")
        with pytest.raises(MissingCredentialError):
            TopHeadlinesTool(http, NewsConfig(), "")


class TestAnalyzeUrl:
    @pytest.mark.asyncio
    async def test_analyze_page(self, full_registry):
        result = await full_registry.invoke("analyze_url", {"url": "https://example.com/about"})
        assert result.raw.patterns.emails == ["info@example.com"]
        assert result.raw.patterns.hashtags == ["#launch"]
        assert "do not count" not in result.display
        assert "URL: https://example.com/about" in result.display

    @pytest.mark.asyncio
    async def test_plain_text_is_not_parsed_as_html(self):
        registry, _ = registry_with(
            lambda request: httpx.Response(200, text="plain 42", headers={"content-type": "text/plain"})
        )
        result = await registry.invoke("analyze_url", {"url": "http://example.com/file.txt"})
        assert result.raw.stats.word_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["ftp://example.com/file", "example.com", "https://", "http://[::1"])
    async def test_rejects_non_http_urls(self, url):
        registry, transport = registry_with(json_handler({}))
        with pytest.raises(InvalidEnumValueError):
            await registry.invoke("analyze_url", {"url": url})
        assert transport.requests == []


def test_build_registry_requires_credentials(http):
    with pytest.raises(MissingCredentialError, match="OPENWEATHER_API_KEY"):
        build_registry(AppConfig(), Secrets(), http)


def test_build_registry_local_only(http):
    registry = build_registry(AppConfig(), Secrets(), http, include_upstream=False)
    names = [t.name for t in registry.list_tools()]
    assert "get_weather" not in names
    assert "search_news" not in names
    assert "calculator" in names


@pytest.mark.asyncio
async def test_concurrent_invocations_do_not_interfere():
    delays = {"Tokyo": 0.03, "Paris": 0.0, "Lima": 0.01}

    async def handler(request):
        city = request.url.params["q"]
        await asyncio.sleep(delays[city])
        payload = copy.deepcopy(WEATHER_PAYLOAD)
        payload["name"] = city
        return httpx.Response(200, json=payload)

    registry, transport = registry_with(handler)
    tools_before = registry.list_tools()

    calls = [
        ("get_weather", {"city": "Tokyo"}),
        ("base64_encoder", {"text": "hello"}),
        ("get_weather", {"city": "Paris"}),
        ("uuid_generator", {"count": 4, "format": "compact"}),
        ("get_weather", {"city": "Lima"}),
        ("base64_encoder", {"text": "aGk=", "operation": "decode"}),
    ]
    results = await asyncio.gather(*(registry.invoke(name, args) for name, args in calls))

    assert [r.tool_name for r in results] == [name for name, _ in calls]
    assert [r.raw.weather.city_name for r in (results[0], results[2], results[4])] == ["Tokyo", "Paris", "Lima"]
    assert "[Current weather in Paris, JP]" in results[2].display
    assert results[1].raw.processed_text == "aGVsbG8="
    assert results[5].raw.processed_text == "hi"
    assert len(results[3].raw.uuids) == 4
    assert len(transport.requests) == 3
    assert registry.list_tools() == tools_before
