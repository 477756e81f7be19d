import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from toolrelay.config.schema import NewsConfig
from toolrelay.config.secrets import MissingCredentialError
from toolrelay.services.api_models import Article, NewsResponse
from toolrelay.services.http_client import HttpClientService
from toolrelay.tools.base import (
    ParameterType,
    ToolDefinition,
    ToolParameter,
    choose_option,
    clamp,
)
from toolrelay.util.text import truncate

logger = logging.getLogger(__name__)

MIN_LIMIT = 1
MAX_LIMIT = 20
DEFAULT_LIMIT = 5
DESCRIPTION_LIMIT = 100
CATEGORIES = ["business", "entertainment", "general", "health", "science", "sports", "technology"]


@dataclass(frozen=True)
class SearchNewsArgs:
    query: str
    limit: int = DEFAULT_LIMIT


@dataclass(frozen=True)
class HeadlinesArgs:
    country: str
    category: str | None = None
    limit: int = DEFAULT_LIMIT


@dataclass(frozen=True)
class NewsDigest:
    articles: list[Article]
    limit: int
    total_results: int | None = None


def format_published_at(value: str) -> str:
    """Render an ISO timestamp as ``YYYY-MM-DD HH:MM``; unparseable values pass through."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M")


def format_digest(digest: NewsDigest) -> str:
    articles = digest.articles[: digest.limit]
    if not articles:
        return "No matching news found."

    lines = ["[Latest news]", f"Articles: {len(articles)}"]
    for idx, article in enumerate(articles, start=1):
        lines.append(f"\n{idx}. {article.title}")
        if article.source is not None:
            lines.append(f"   Source: {article.source.name}")
        lines.append(f"   Published: {format_published_at(article.published_at)}")
        if article.description:
            lines.append(f"   Summary: {truncate(article.description, DESCRIPTION_LIMIT)}")
        lines.append(f"   URL: {article.url}")

    if digest.total_results is not None and digest.total_results > digest.limit:
        lines.append(f"\n({digest.total_results - digest.limit} more articles available)")
    return "\n".join(lines)


def _limit_parameter() -> ToolParameter:
    return ToolParameter(
        name="limit",
        type=ParameterType.INTEGER,
        description=f"Number of articles to return ({MIN_LIMIT}-{MAX_LIMIT}, default: {DEFAULT_LIMIT})",
        required=False,
    )


class _NewsTool:
    def __init__(self, http: HttpClientService, config: NewsConfig, api_key: str) -> None:
        if not api_key:
            raise MissingCredentialError(
                "News API key is not configured. Set the NEWS_API_KEY environment variable."
            )
        self._http = http
        self._config = config
        self._api_key = api_key

    async def _fetch(self, endpoint: str, params: dict[str, Any]) -> NewsResponse:
        data = await self._http.get_json(
            f"{self._config.base_url}/{endpoint}",
            params=params,
            headers={"X-Api-Key": self._api_key},
        )
        return NewsResponse.from_dict(data)

    def format(self, result: NewsDigest) -> str:
        return format_digest(result)


class SearchNewsTool(_NewsTool):
    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="search_news",
            description="Search recent news articles by keyword.",
            parameters=[
                ToolParameter(
                    name="query",
                    type=ParameterType.STRING,
                    description="Search keywords",
                ),
                _limit_parameter(),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> SearchNewsArgs:
        return SearchNewsArgs(
            query=values["query"],
            limit=clamp(values.get("limit", DEFAULT_LIMIT), MIN_LIMIT, MAX_LIMIT),
        )

    async def execute(self, args: SearchNewsArgs) -> NewsDigest:
        logger.info(f"Searching news for query: {args.query}, limit: {args.limit}")
        news = await self._fetch("everything", {
            "q": args.query,
            "language": self._config.language,
            "sortBy": "publishedAt",
            "pageSize": args.limit,
        })
        return NewsDigest(articles=news.articles, limit=args.limit, total_results=news.total_results)


class TopHeadlinesTool(_NewsTool):
    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="get_top_headlines",
            description="Get the latest top headlines for a country.",
            parameters=[
                ToolParameter(
                    name="country",
                    type=ParameterType.STRING,
                    description=f"Two-letter country code (default: {self._config.default_country})",
                    required=False,
                ),
                ToolParameter(
                    name="category",
                    type=ParameterType.STRING,
                    description=f"News category ({', '.join(CATEGORIES)})",
                    required=False,
                    enum=CATEGORIES,
                ),
                _limit_parameter(),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> HeadlinesArgs:
        category = values.get("category")
        if category is not None:
            category = choose_option("get_top_headlines", "category", category, CATEGORIES)
        return HeadlinesArgs(
            country=values.get("country", self._config.default_country).strip().lower(),
            category=category,
            limit=clamp(values.get("limit", DEFAULT_LIMIT), MIN_LIMIT, MAX_LIMIT),
        )

    async def execute(self, args: HeadlinesArgs) -> NewsDigest:
        logger.info(
            f"Fetching top headlines - country: {args.country}, "
            f"category: {args.category}, limit: {args.limit}"
        )
        params: dict[str, Any] = {"country": args.country, "pageSize": args.limit}
        if args.category is not None:
            params["category"] = args.category
        news = await self._fetch("top-headlines", params)
        return NewsDigest(articles=news.articles, limit=args.limit, total_results=news.total_results)
