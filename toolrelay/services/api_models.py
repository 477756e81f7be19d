"""Typed views of the OpenWeather and NewsAPI JSON responses.

Unknown keys are ignored. A missing required key or a value of the wrong
type raises UpstreamError, since the body came from the upstream service.
"""
from dataclasses import dataclass
from typing import Any

from toolrelay.services.http_client import UpstreamError

_NUMBER = (int, float)


def _field(data: Any, key: str, kind: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(data, dict) or key not in data or data[key] is None:
        raise UpstreamError(f"Malformed {where} response: missing '{key}'")
    value = data[key]
    if not isinstance(value, kind) or isinstance(value, bool):
        raise UpstreamError(f"Malformed {where} response: unexpected type for '{key}'")
    return value


def _optional(data: dict[str, Any], key: str, kind: type | tuple[type, ...], where: str) -> Any:
    if data.get(key) is None:
        return None
    return _field(data, key, kind, where)


@dataclass(frozen=True)
class MainReadings:
    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    pressure: int
    humidity: int


@dataclass(frozen=True)
class WeatherCondition:
    id: int
    main: str
    description: str
    icon: str


@dataclass(frozen=True)
class Wind:
    speed: float
    deg: int | None = None


@dataclass(frozen=True)
class WeatherResponse:
    city_name: str
    main: MainReadings
    conditions: list[WeatherCondition]
    country: str
    wind: Wind | None = None
    cloudiness: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "WeatherResponse":
        where = "weather"
        main = _field(data, "main", dict, where)
        conditions = _field(data, "weather", list, where)
        if not conditions:
            raise UpstreamError("Malformed weather response: no weather conditions")

        wind_data = _optional(data, "wind", dict, where)
        clouds_data = _optional(data, "clouds", dict, where)
        sys_data = _field(data, "sys", dict, where)

        return cls(
            city_name=_field(data, "name", str, where),
            main=MainReadings(
                temp=float(_field(main, "temp", _NUMBER, where)),
                feels_like=float(_field(main, "feels_like", _NUMBER, where)),
                temp_min=float(_field(main, "temp_min", _NUMBER, where)),
                temp_max=float(_field(main, "temp_max", _NUMBER, where)),
                pressure=int(_field(main, "pressure", _NUMBER, where)),
                humidity=int(_field(main, "humidity", _NUMBER, where)),
            ),
            conditions=[
                WeatherCondition(
                    id=int(_field(c, "id", _NUMBER, where)),
                    main=_field(c, "main", str, where),
                    description=_field(c, "description", str, where),
                    icon=_field(c, "icon", str, where),
                )
                for c in conditions
            ],
            country=_field(sys_data, "country", str, where),
            wind=Wind(
                speed=float(_field(wind_data, "speed", _NUMBER, where)),
                deg=_optional(wind_data, "deg", int, where),
            ) if wind_data is not None else None,
            cloudiness=int(_field(clouds_data, "all", _NUMBER, where)) if clouds_data is not None else None,
        )


@dataclass(frozen=True)
class ArticleSource:
    name: str
    id: str | None = None


@dataclass(frozen=True)
class Article:
    title: str
    url: str
    published_at: str
    source: ArticleSource | None = None
    author: str | None = None
    description: str | None = None
    url_to_image: str | None = None
    content: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Article":
        where = "news article"
        title = _field(data, "title", str, where)
        source_data = _optional(data, "source", dict, where)
        return cls(
            title=title,
            url=_field(data, "url", str, where),
            published_at=_field(data, "publishedAt", str, where),
            source=ArticleSource(
                name=_field(source_data, "name", str, where),
                id=_optional(source_data, "id", str, where),
            ) if source_data is not None else None,
            author=_optional(data, "author", str, where),
            description=_optional(data, "description", str, where),
            url_to_image=_optional(data, "urlToImage", str, where),
            content=_optional(data, "content", str, where),
        )


@dataclass(frozen=True)
class NewsResponse:
    status: str
    articles: list[Article]
    total_results: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "NewsResponse":
        where = "news"
        return cls(
            status=_field(data, "status", str, where),
            articles=[Article.from_dict(a) for a in _field(data, "articles", list, where)],
            total_results=_optional(data, "totalResults", int, where),
        )
