import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from toolrelay.config.schema import WeatherConfig
from toolrelay.config.secrets import MissingCredentialError
from toolrelay.services.api_models import WeatherResponse
from toolrelay.services.http_client import HttpClientService
from toolrelay.tools.base import ParameterType, ToolDefinition, ToolParameter

logger = logging.getLogger(__name__)

_WET_CONDITIONS = {"rain", "drizzle", "thunderstorm"}


@dataclass(frozen=True)
class WeatherReport:
    weather: WeatherResponse
    advice: list[str] = field(default_factory=list)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_weather(weather: WeatherResponse) -> str:
    description = weather.conditions[0].description if weather.conditions else "unknown"
    wind_speed = weather.wind.speed if weather.wind else 0.0
    lines = [
        f"[Current weather in {weather.city_name}, {weather.country}]",
        f"Conditions: {description}",
        f"Temperature: {round_half_up(weather.main.temp)}°C "
        f"(feels like {round_half_up(weather.main.feels_like)}°C)",
        f"Humidity: {weather.main.humidity}%",
        f"Wind speed: {wind_speed}m/s",
    ]
    if weather.cloudiness is not None:
        lines.append(f"Cloudiness: {weather.cloudiness}%")
    return "\n".join(lines)


def weather_advice(weather: WeatherResponse) -> list[str]:
    temp = round_half_up(weather.main.temp)
    condition = weather.conditions[0].main.lower() if weather.conditions else ""
    humidity = weather.main.humidity

    if temp > 30:
        advice = ["It is very hot. Watch out for heatstroke and drink water often."]
    elif temp > 25:
        advice = ["It is a warm day. It should be comfortable."]
    elif temp > 15:
        advice = ["The temperature is pleasant."]
    elif temp > 5:
        advice = ["It is a little chilly. A jacket would help."]
    else:
        advice = ["It is quite cold. Dress warmly before heading out."]

    if condition in _WET_CONDITIONS:
        advice.append("Don't forget your umbrella.")
    elif condition == "snow":
        advice.append("Watch your step and avoid slippery places.")
    elif condition == "clear" and temp > 25:
        advice.append("The sun looks strong. Sun protection is recommended.")

    if humidity > 80:
        advice.append("Humidity is high. It may feel muggy.")
    elif humidity < 40:
        advice.append("The air is dry. Remember to stay hydrated.")

    return advice


class _WeatherTool:
    name: str
    description: str
    with_advice: bool

    def __init__(self, http: HttpClientService, config: WeatherConfig, api_key: str) -> None:
        if not api_key:
            raise MissingCredentialError(
                "OpenWeather API key is not configured. Set the OPENWEATHER_API_KEY environment variable."
            )
        self._http = http
        self._config = config
        self._api_key = api_key

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=[
                ToolParameter(
                    name="city",
                    type=ParameterType.STRING,
                    description="Name of the city to get the weather for",
                ),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> str:
        return values["city"].strip()

    async def fetch_weather(self, city: str) -> WeatherResponse:
        logger.info(f"Fetching weather for city: {city}")
        data = await self._http.get_json(
            f"{self._config.base_url}/weather",
            params={
                "q": city,
                "appid": self._api_key,
                "units": self._config.units,
                "lang": self._config.lang,
            },
        )
        return WeatherResponse.from_dict(data)

    async def execute(self, args: str) -> WeatherReport:
        weather = await self.fetch_weather(args)
        advice = weather_advice(weather) if self.with_advice else []
        return WeatherReport(weather=weather, advice=advice)

    def format(self, result: WeatherReport) -> str:
        text = format_weather(result.weather)
        if result.advice:
            text += "\n\nAdvice:\n" + "\n".join(result.advice)
        return text


class GetWeatherTool(_WeatherTool):
    name = "get_weather"
    description = "Get the current weather for a city."
    with_advice = False


class GetWeatherWithAdviceTool(_WeatherTool):
    name = "get_weather_with_advice"
    description = "Get the current weather for a city together with practical advice."
    with_advice = True
