import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from toolrelay.services.http_client import HttpClientService
from toolrelay.tools.base import ParameterType, ToolDefinition, ToolParameter
from toolrelay.tools.builtin.text_analysis import (
    CharacterBreakdown,
    PatternMatches,
    TextStats,
    character_types,
    extract_patterns,
    format_character_types,
    format_patterns,
    format_text_stats,
    text_stats,
)
from toolrelay.tools.errors import InvalidEnumValueError

logger = logging.getLogger(__name__)

NAME = "analyze_url"
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class UrlAnalysis:
    url: str
    stats: TextStats
    patterns: PatternMatches
    characters: CharacterBreakdown


def html_to_text(html: str) -> str:
    """Strip scripts, styles and markup, collapsing whitespace."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return _WHITESPACE_RE.sub(" ", soup.get_text(separator=" ")).strip()


class AnalyzeUrlTool:
    """Fetch a web page and run the text analyses over its visible text."""

    def __init__(self, http: HttpClientService) -> None:
        self._http = http

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=NAME,
            description="Fetch a web page and analyze its text content.",
            parameters=[
                ToolParameter(
                    name="url",
                    type=ParameterType.STRING,
                    description="Full http:// or https:// URL of the page to analyze",
                ),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> str:
        url = values["url"].strip()
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise InvalidEnumValueError(NAME, "url", url, ["http", "https"]) from e
        if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
            raise InvalidEnumValueError(NAME, "url", url, ["http", "https"])
        return url

    async def execute(self, args: str) -> UrlAnalysis:
        logger.info(f"Fetching content from URL: {args}")
        content_type, raw_content = await self._http.get_text(args)

        if "text/html" in content_type.lower() or not content_type:
            text = html_to_text(raw_content)
        else:
            text = raw_content.strip()

        return UrlAnalysis(
            url=args,
            stats=text_stats(text),
            patterns=extract_patterns(text),
            characters=character_types(text),
        )

    def format(self, result: UrlAnalysis) -> str:
        return "\n\n".join([
            f"[URL analysis]\nURL: {result.url}",
            format_text_stats(result.stats),
            format_patterns(result.patterns),
            format_character_types(result.characters),
        ])
