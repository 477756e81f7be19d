import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


class MissingCredentialError(RuntimeError):
    pass


@dataclass(frozen=True)
class Secrets:
    openweather_api_key: str = ""
    news_api_key: str = ""

    def has_weather(self) -> bool:
        return bool(self.openweather_api_key)

    def has_news(self) -> bool:
        return bool(self.news_api_key)

    def validate(self) -> None:
        """Raise MissingCredentialError if an upstream API key is missing."""
        if not self.has_weather():
            raise MissingCredentialError(
                "OpenWeather API key is not configured. Set the OPENWEATHER_API_KEY environment variable."
            )
        if not self.has_news():
            raise MissingCredentialError(
                "News API key is not configured. Set the NEWS_API_KEY environment variable."
            )


def load_secrets(env_path: Path = Path(".env")) -> Secrets:
    """Load secrets from environment variables and .env file."""
    load_dotenv(env_path)

    return Secrets(
        openweather_api_key=os.environ.get("OPENWEATHER_API_KEY", "").strip(),
        news_api_key=os.environ.get("NEWS_API_KEY", "").strip(),
    )
