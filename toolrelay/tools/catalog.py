import logging

from toolrelay.config.schema import AppConfig
from toolrelay.config.secrets import Secrets
from toolrelay.services.http_client import HttpClientService
from toolrelay.tools.builtin.base64_encoder import Base64EncoderTool
from toolrelay.tools.builtin.calculator import CalculatorTool, OperatorFallback
from toolrelay.tools.builtin.echo import EchoTool
from toolrelay.tools.builtin.news import SearchNewsTool, TopHeadlinesTool
from toolrelay.tools.builtin.text_analysis import (
    AnalyzeCharacterTypesTool,
    AnalyzeTextTool,
    ExtractPatternsTool,
)
from toolrelay.tools.builtin.time_tool import TimeTool
from toolrelay.tools.builtin.url_analysis import AnalyzeUrlTool
from toolrelay.tools.builtin.uuid_generator import UUIDGeneratorTool
from toolrelay.tools.builtin.weather import GetWeatherTool, GetWeatherWithAdviceTool
from toolrelay.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def build_registry(
    config: AppConfig,
    secrets: Secrets,
    http: HttpClientService,
    include_upstream: bool = True,
) -> ToolRegistry:
    """Assemble the frozen tool registry.

    With ``include_upstream`` the weather and news tools are registered and
    missing API keys raise MissingCredentialError before any tool runs.
    """
    if include_upstream:
        secrets.validate()

    registry = ToolRegistry(strict=config.registry.strict)
    registry.register(EchoTool())
    registry.register(TimeTool())
    registry.register(CalculatorTool(OperatorFallback(config.registry.calculator_fallback.lower())))
    registry.register(UUIDGeneratorTool())
    registry.register(Base64EncoderTool())
    registry.register(AnalyzeTextTool())
    registry.register(ExtractPatternsTool())
    registry.register(AnalyzeCharacterTypesTool())
    registry.register(AnalyzeUrlTool(http))

    if include_upstream:
        registry.register(GetWeatherTool(http, config.weather, secrets.openweather_api_key))
        registry.register(GetWeatherWithAdviceTool(http, config.weather, secrets.openweather_api_key))
        registry.register(SearchNewsTool(http, config.news, secrets.news_api_key))
        registry.register(TopHeadlinesTool(http, config.news, secrets.news_api_key))
    else:
        logger.info("Upstream weather and news tools disabled")

    registry.freeze()
    return registry
