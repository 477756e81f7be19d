import httpx
import pytest

from toolrelay.config.schema import AppConfig, HttpConfig
from toolrelay.config.secrets import Secrets
from toolrelay.services.http_client import HttpClientService
from toolrelay.tools.catalog import build_registry

WEATHER_PAYLOAD = {
    "name": "Tokyo",
    "main": {
        "temp": 26.4,
        "feels_like": 27.6,
        "temp_min": 25.0,
        "temp_max": 28.0,
        "pressure": 1012,
        "humidity": 85,
    },
    "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
    "wind": {"speed": 3.6, "deg": 180},
    "clouds": {"all": 75},
    "sys": {"country": "JP"},
    "cod": 200,
}

LONG_DESCRIPTION = "A" * 150

NEWS_PAYLOAD = {
    "status": "ok",
    "totalResults": 12,
    "articles": [
        {
            "source": {"id": None, "name": "Example Times"},
            "author": "Jane Doe",
            "title": "First headline",
            "description": LONG_DESCRIPTION,
            "url": "https://news.example.com/first",
            "urlToImage": None,
            "publishedAt": "2024-05-01T09:30:00Z",
            "content": "Body",
        },
        {
            "source": None,
            "author": None,
            "title": "Second headline",
            "description": None,
            "url": "https://news.example.com/second",
            "urlToImage": None,
            "publishedAt": "not a date",
            "content": None,
        },
    ],
}

HTML_PAGE = """
<html>
  <head><title>Example</title><style>body { color: red; }</style></head>
  <body>
    <script>var hidden = "do not count";</script>
    <p>Contact info@example.com or visit https://example.com/about</p>
    <p>#launch 2024</p>
  </body>
</html>
"""


def upstream_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/weather"):
        return httpx.Response(200, json=WEATHER_PAYLOAD)
    if path.endswith("/everything") or path.endswith("/top-headlines"):
        return httpx.Response(200, json=NEWS_PAYLOAD)
    return httpx.Response(200, text=HTML_PAGE, headers={"content-type": "text/html; charset=utf-8"})


@pytest.fixture
def app_config():
    return AppConfig()


@pytest.fixture
def secrets():
    return Secrets(openweather_api_key="test-weather-key", news_api_key="test-news-key")


@pytest.fixture
def http():
    return HttpClientService(HttpConfig(), transport=httpx.MockTransport(upstream_handler))


@pytest.fixture
def full_registry(app_config, secrets, http):
    return build_registry(app_config, secrets, http)
